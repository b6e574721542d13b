"""
Backend applicativo Medical Appointments.

Struttura:
- config.py     : variabili d'ambiente e logging
- db.py         : engine e sessioni SQLAlchemy
- models.py     : modello ORM Appointment e enum degli stati
- schemas.py    : validazione payload (create / update) e rappresentazione wire
- lifecycle.py  : regole di transizione degli stati
- functional.py : funzioni pure (filtri, ordinamenti, statistiche, disponibilità slot)
- storage.py    : gateway di persistenza (SQLAlchemy + fake in memoria)
- api_main.py   : API REST FastAPI
- seed.py       : dati demo
- cli.py        : gestione appuntamenti da riga di comando
"""
