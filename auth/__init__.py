# Auth module - Credentials and OAuth1 request signing
# Tokens are issued elsewhere; this only signs

from .credentials import Credentials
from .oauth1 import OAuth1Signer, base_string, generate_nonce, percent_encode

__all__ = ["Credentials", "OAuth1Signer", "base_string", "generate_nonce", "percent_encode"]
