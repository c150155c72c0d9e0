"""Password and TOTP authentication service."""
