"""SA-RP User Control Panel backend."""
