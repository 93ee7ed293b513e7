"""Client side of GCSS: remote store client, sync engine and CLI."""
