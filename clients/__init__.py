"""Infrastructure clients: Vault secrets, PostgreSQL, Valkey and the email gateway."""
