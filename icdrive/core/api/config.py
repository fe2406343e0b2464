"""
API configuration module.

Provides configuration for the iCloud web API client: endpoints,
the fixed header tables every request carries, and the aiohttp
connection settings.
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Tuple
import ssl


# Request header names
OAUTH_STATE_HEADER = 'X-Apple-OAuth-State'
SESSION_ID_HEADER = 'X-Apple-ID-Session-Id'
SCNT_HEADER = 'scnt'
COOKIE_HEADER = 'Cookie'

# Response header names
ACCOUNT_COUNTRY_HEADER = 'X-Apple-ID-Account-Country'
SESSION_TOKEN_HEADER = 'X-Apple-Session-Token'
TRUST_TOKEN_HEADER = 'X-Apple-TwoSV-Trust-Token'
SET_COOKIE_HEADER = 'Set-Cookie'
RESPONSE_DISPOSITION_HEADER = 'X-Apple-I-Rscd'

WIDGET_KEY = 'd39ba9916b7251055b22c7f910e2ea796ee65e98b2ddecea8f5dde8d9d1a815d'

GLOBAL_HEADERS: Tuple[Tuple[str, str], ...] = (
    ('Origin', 'https://www.icloud.com'),
    ('Referer', 'https://www.icloud.com/'),
)

AUTH_HEADERS: Tuple[Tuple[str, str], ...] = (
    ('X-Apple-OAuth-Client-Id', WIDGET_KEY),
    ('X-Apple-OAuth-Client-Type', 'firstPartyAuth'),
    ('X-Apple-OAuth-Redirect-URI', 'https://www.icloud.com'),
    ('X-Apple-OAuth-Require-Grant-Code', 'true'),
    ('X-Apple-OAuth-Response-Mode', 'web_message'),
    ('X-Apple-OAuth-Response-Type', 'code'),
    ('X-Apple-Widget-Key', WIDGET_KEY),
)


@dataclass
class ProxyConfig:
    """
    Proxy configuration.

    Supports HTTP and HTTPS proxies.
    """
    url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None

    def to_aiohttp_proxy(self) -> Optional[str]:
        """Convert to aiohttp proxy format."""
        if not self.url:
            return None

        if self.username and self.password:
            # Insert credentials into URL
            if '://' in self.url:
                protocol, rest = self.url.split('://', 1)
                return f"{protocol}://{self.username}:{self.password}@{rest}"

        return self.url


@dataclass
class SSLConfig:
    """
    SSL/TLS configuration.

    Allows customization of SSL behavior for security requirements.
    """
    verify: bool = True
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    check_hostname: bool = True

    def create_ssl_context(self):
        """Create SSL context from configuration (False disables verification)."""
        if not self.verify:
            return False

        context = ssl.create_default_context()

        if self.ca_file:
            context.load_verify_locations(self.ca_file)

        if self.cert_file:
            context.load_cert_chain(
                self.cert_file,
                keyfile=self.key_file
            )

        context.check_hostname = self.check_hostname

        return context


@dataclass
class TimeoutConfig:
    """
    Timeout configuration for the aiohttp session.

    None leaves a limit unset; the core itself never imposes one.
    """
    total: Optional[float] = None
    connect: Optional[float] = 30.0
    sock_read: Optional[float] = 60.0
    sock_connect: Optional[float] = 30.0

    def to_aiohttp_timeout(self):
        """Convert to aiohttp ClientTimeout."""
        import aiohttp
        return aiohttp.ClientTimeout(
            total=self.total,
            connect=self.connect,
            sock_read=self.sock_read,
            sock_connect=self.sock_connect
        )


@dataclass
class APIConfig:
    """
    Complete API configuration.

    Centralizes endpoints and connection options for the iCloud client.
    """
    # Endpoints
    auth_endpoint: str = 'https://idmsa.apple.com/appleauth/auth'
    setup_endpoint: str = 'https://setup.icloud.com/setup/ws/1'

    # User agent
    user_agent: str = 'icdrive/1.0.0'

    # Sub-configurations
    proxy: Optional[ProxyConfig] = None
    ssl: SSLConfig = field(default_factory=SSLConfig)
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)

    # Additional headers
    extra_headers: Dict[str, str] = field(default_factory=dict)

    # Connection pool settings
    limit_per_host: int = 10
    limit: int = 100

    @classmethod
    def default(cls) -> 'APIConfig':
        """Create default configuration."""
        return cls()

    @classmethod
    def with_proxy(cls, proxy_url: str, **kwargs) -> 'APIConfig':
        """Create configuration with proxy."""
        return cls(
            proxy=ProxyConfig(url=proxy_url),
            **kwargs
        )

    @classmethod
    def insecure(cls, **kwargs) -> 'APIConfig':
        """Create configuration with SSL verification disabled."""
        return cls(
            ssl=SSLConfig(verify=False, check_hostname=False),
            **kwargs
        )

    @property
    def signin_url(self) -> str:
        return f"{self.auth_endpoint}/signin?isRememberMeEnable=true"

    @property
    def account_login_url(self) -> str:
        return f"{self.setup_endpoint}/accountLogin"

    @property
    def trust_url(self) -> str:
        return f"{self.auth_endpoint}/2sv/trust"

    @property
    def security_code_url(self) -> str:
        return f"{self.auth_endpoint}/verify/trusteddevice/securitycode"

    def get_connector_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp TCPConnector."""
        return {
            'limit': self.limit,
            'limit_per_host': self.limit_per_host,
            'ssl': self.ssl.create_ssl_context(),
        }

    def get_session_kwargs(self) -> Dict[str, Any]:
        """Get kwargs for aiohttp ClientSession."""
        headers = {
            'User-Agent': self.user_agent,
            **self.extra_headers
        }

        return {
            'headers': headers,
            'timeout': self.timeout.to_aiohttp_timeout(),
        }
