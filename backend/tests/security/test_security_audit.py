"""
Backend Security Tests
OWASP-aligned checks on credentials, tokens, input validation and
secrets exposure.
"""
import pytest
from datetime import datetime, timezone

from fastapi.testclient import TestClient
from pydantic import ValidationError


class TestAuthenticationSecurity:
    """Tests for authentication security."""
    
    def test_password_not_stored_plaintext(self):
        """Passwords must be hashed, never stored in plain text."""
        from gridbazaar.core.security import get_password_hash
        
        password = "SuperSecret123!"
        hashed = get_password_hash(password)
        
        assert password not in hashed
        assert hashed.startswith("$2b$")
    
    def test_password_hash_unique(self):
        """Same password should produce different hashes (salt)."""
        from gridbazaar.core.security import get_password_hash
        
        assert get_password_hash("SamePassword123!") != get_password_hash("SamePassword123!")
    
    def test_jwt_token_has_expiry(self):
        from gridbazaar.core.security import create_access_token, decode_token
        
        payload = decode_token(create_access_token(subject=1))
        
        assert payload["exp"] > datetime.now(timezone.utc).timestamp()
    
    def test_refresh_token_not_accepted_as_access(self):
        from gridbazaar.core.security import create_refresh_token, verify_token
        
        token = create_refresh_token(subject=1)
        
        assert verify_token(token, "access") is None
        assert verify_token(token, "refresh") == "1"
    
    @pytest.mark.parametrize("token", [
        "invalid.token.here",
        "",
        "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.invalid.payload",
    ])
    def test_invalid_token_rejected(self, token):
        from gridbazaar.core.security import decode_token
        
        assert decode_token(token) is None
    
    def test_token_entropy(self):
        from gridbazaar.core.security import create_access_token
        
        tokens = {create_access_token(subject=1) for _ in range(5)}
        
        assert len(tokens) == 5


class TestInputValidation:
    """Tests for input validation security."""
    
    @pytest.mark.parametrize("email", [
        "notanemail",
        "@nodomain.com",
        "spaces in@email.com",
        "",
    ])
    def test_email_format_validation(self, email):
        from gridbazaar.schemas.user import UserCreate
        
        with pytest.raises(ValidationError):
            UserCreate(email=email, username="testuser", password="ValidPass123!")
    
    def test_password_minimum_length(self):
        from gridbazaar.schemas.user import UserCreate
        
        with pytest.raises(ValidationError):
            UserCreate(email="valid@email.com", username="testuser", password="short")
    
    def test_malformed_filter_rejected(self):
        """Realtime filters accept only column=eq.value."""
        from gridbazaar.realtime.broker import parse_filter
        
        for expr in ["seller_id=in.(1,2)", "seller_id; DROP TABLE", "=eq.1"]:
            with pytest.raises(ValueError):
                parse_filter(expr)


class TestDataProtection:
    """Tests for data protection."""
    
    def test_password_not_in_response_schema(self):
        from gridbazaar.schemas.user import User
        
        fields = set(User.model_fields)
        
        assert "password" not in fields
        assert "hashed_password" not in fields
    
    def test_secret_map_token_never_served(self, monkeypatch):
        from unittest.mock import MagicMock
        from gridbazaar.config import settings
        from gridbazaar.main import create_application
        
        monkeypatch.setattr(settings, "MAPBOX_PUBLIC_TOKEN", "sk.very-secret")
        client = TestClient(create_application(database=MagicMock()))
        
        response = client.get(f"{settings.FUNCTIONS_PREFIX}/get-mapbox-config")
        
        assert response.status_code == 400
        assert "very-secret" not in response.text


class TestCryptography:
    """Tests for cryptographic operations."""
    
    def test_jwt_algorithm_secure(self):
        from gridbazaar.config import settings
        
        assert settings.JWT_ALGORITHM in ["HS256", "HS384", "HS512", "RS256", "RS384", "RS512"]
    
    def test_secret_key_length(self):
        from gridbazaar.config import settings
        
        if settings.APP_ENV == "testing":
            assert len(settings.SECRET_KEY) >= 16
        else:
            assert len(settings.SECRET_KEY) >= 32
    
    def test_verification_codes_are_random(self):
        from gridbazaar.core.verification.service import generate_code
        
        codes = {generate_code(6) for _ in range(20)}
        
        assert len(codes) > 1
