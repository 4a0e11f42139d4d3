"""Services for es-migrate."""
