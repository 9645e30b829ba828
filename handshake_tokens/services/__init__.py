"""Services Layer — token operations built on the Database collaborator."""
