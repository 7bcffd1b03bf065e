"""Router FastAPI, uno per risorsa, montati sotto il prefisso API dal gateway."""
