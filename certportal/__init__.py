"""Certificate Portal: credentials, participant records, and certificate rendering."""
