"""
Unit Tests - Configuration Settings
"""
from gridbazaar.config import Settings


class TestSettings:
    
    def test_defaults(self):
        s = Settings(_env_file=None)
        
        assert s.APP_NAME == "GridBazaar"
        assert s.API_V1_PREFIX == "/api/v1"
        assert s.FUNCTIONS_PREFIX == "/functions/v1"
        assert s.VERIFICATION_CODE_LENGTH == 6
        assert s.VERIFICATION_CODE_TTL_MINUTES == 15
        assert s.SCANNER_IDLE_SITE_LIMIT == 50
        assert s.SCANNER_COMPANY_LIMIT == 25
    
    def test_database_url_from_parts(self):
        s = Settings(
            _env_file=None,
            DATABASE_URL="",
            POSTGRES_USER="u",
            POSTGRES_PASSWORD="p",
            POSTGRES_HOST="db",
            POSTGRES_PORT=5433,
            POSTGRES_DB="grid",
        )
        
        assert s.database_url == "postgresql+asyncpg://u:p@db:5433/grid"
    
    def test_database_url_forces_asyncpg(self):
        s = Settings(_env_file=None, DATABASE_URL="postgresql://u:p@h/d")
        
        assert s.database_url == "postgresql+asyncpg://u:p@h/d"
    
    def test_cors_origins_from_comma_list(self):
        s = Settings(_env_file=None, CORS_ORIGINS="http://a.com, http://b.com")
        
        assert s.CORS_ORIGINS == ["http://a.com", "http://b.com"]
    
    def test_cors_origins_from_json(self):
        s = Settings(_env_file=None, CORS_ORIGINS='["http://a.com"]')
        
        assert s.CORS_ORIGINS == ["http://a.com"]
