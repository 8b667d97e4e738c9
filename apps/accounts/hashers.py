from django.conf import settings
from django.contrib.auth.hashers import BCryptSHA256PasswordHasher


class BCryptRoundsPasswordHasher(BCryptSHA256PasswordHasher):
    """bcrypt_sha256 hasher whose work factor comes from BCRYPT_SALT_ROUNDS."""

    @property
    def rounds(self):
        return getattr(settings, 'BCRYPT_SALT_ROUNDS', 12)
