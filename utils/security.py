"""
Credential hashing and verification
"""


class CredentialVerifier:
    """Opaque credential scheme backed by Flask-Bcrypt.

    Services only ever see the stored hash string; how it is produced and
    compared stays in here.
    """

    def __init__(self, bcrypt):
        self.bcrypt = bcrypt

    def hash(self, secret):
        """Hash a plaintext secret for storage"""
        return self.bcrypt.generate_password_hash(secret).decode('utf-8')

    def verify(self, secret, stored_hash):
        """Check a plaintext secret against a stored hash"""
        if not secret or not stored_hash:
            return False
        try:
            return self.bcrypt.check_password_hash(stored_hash, secret)
        except ValueError:
            # Stored value is not a bcrypt hash
            return False
