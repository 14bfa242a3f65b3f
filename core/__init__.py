"""
Core functionality per insight-processor.

Questo modulo contiene:
- Configurazione (config.py)
- Eccezioni (exceptions.py)
- Logging (logger.py)
"""
