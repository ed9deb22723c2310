"""sleeptimer: a countdown timer that quits its host application on expiry."""

__version__ = "0.1.0"
