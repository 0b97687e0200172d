from .passwords import PasswordHasher, PasswordPolicy, PasswordValidationError, validate_password

__all__ = ["PasswordHasher", "PasswordPolicy", "PasswordValidationError", "validate_password"]
