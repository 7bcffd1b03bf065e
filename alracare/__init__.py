"""
Backend applicativo Alra Care (prenotazioni clinica estetica).

Struttura:
- config.py        : configurazione da variabili d'ambiente (.env)
- db.py            : engine (standard + elevated) e sessioni SQLAlchemy
- models.py        : modelli ORM (prenotazioni, servizi, galleria, impostazioni)
- auth_models.py   : utente admin
- auth_security.py : hash password e token JWT
- procedures.py    : procedure lato database (login, duplicati, statistiche)
- services.py      : logica di dominio (CRUD, response shaping)
- api/             : router FastAPI per risorsa
- api_main.py      : gateway HTTP (CORS, logging, errori, 404)
- seed.py          : dati iniziali
- cli.py           : comandi di amministrazione
- client.py        : client HTTP + LocalMirror per fallback offline
"""
