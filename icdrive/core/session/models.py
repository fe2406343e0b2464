"""
Session data models.

Contains the data classes for the persisted iCloud session snapshot.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Set
import json
import uuid


def generate_session_identifier() -> str:
    """Time-based unique identifier used for the OAuth state nonce."""
    return str(uuid.uuid1())


@dataclass(frozen=True)
class ServiceInfo:
    """Base URL of a named iCloud web service discovered at authentication."""
    url: str

    def to_dict(self) -> dict:
        return {'url': self.url}

    @classmethod
    def from_dict(cls, data: dict) -> 'ServiceInfo':
        return cls(url=data['url'])


@dataclass
class SessionData:
    """
    Complete session data for iCloud authentication.

    Contains all information needed to resume a session
    without re-entering credentials.

    Attributes:
        oauth_state: Per-session nonce, generated once and never changed
        session_id: Value of X-Apple-ID-Session-Id
        session_token: Value of X-Apple-Session-Token
        trust_token: Value of X-Apple-TwoSV-Trust-Token
        scnt: Server continuation token
        account_country: Value of X-Apple-ID-Account-Country
        cookies: Set of "name=value" pairs, one per cookie name
        webservices: Service name to ServiceInfo (e.g. "drive")
    """
    oauth_state: str
    session_id: Optional[str] = None
    session_token: Optional[str] = None
    trust_token: Optional[str] = None
    scnt: Optional[str] = None
    account_country: Optional[str] = None
    cookies: Set[str] = field(default_factory=set)
    webservices: Dict[str, ServiceInfo] = field(default_factory=dict)

    @classmethod
    def new(cls, id_generator: Optional[Callable[[], str]] = None) -> 'SessionData':
        """
        Create a fresh, unauthenticated session.

        Args:
            id_generator: Callable returning a unique identifier string
                (defaults to a time-based UUID)

        Returns:
            SessionData instance with only oauth_state set
        """
        generator = id_generator or generate_session_identifier
        return cls(oauth_state=f"auth-{generator()}")

    def to_dict(self) -> dict:
        """
        Convert to dictionary for serialization.

        Cookies are emitted sorted so equal sessions serialize identically.
        """
        return {
            'oauth_state': self.oauth_state,
            'session_id': self.session_id,
            'session_token': self.session_token,
            'trust_token': self.trust_token,
            'scnt': self.scnt,
            'account_country': self.account_country,
            'cookies': sorted(self.cookies),
            'webservices': {
                name: info.to_dict()
                for name, info in sorted(self.webservices.items())
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SessionData':
        """
        Create from dictionary.

        Args:
            data: Dictionary with session data

        Returns:
            SessionData instance
        """
        return cls(
            oauth_state=data['oauth_state'],
            session_id=data.get('session_id'),
            session_token=data.get('session_token'),
            trust_token=data.get('trust_token'),
            scnt=data.get('scnt'),
            account_country=data.get('account_country'),
            cookies=set(data.get('cookies') or ()),
            webservices={
                name: ServiceInfo.from_dict(info)
                for name, info in (data.get('webservices') or {}).items()
            },
        )

    def to_json(self) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def from_json(cls, json_str: str) -> 'SessionData':
        """Create from JSON string."""
        return cls.from_dict(json.loads(json_str))

    def copy(self) -> 'SessionData':
        """Independent clone; mutating it never affects this session."""
        return SessionData(
            oauth_state=self.oauth_state,
            session_id=self.session_id,
            session_token=self.session_token,
            trust_token=self.trust_token,
            scnt=self.scnt,
            account_country=self.account_country,
            cookies=set(self.cookies),
            webservices=dict(self.webservices),
        )

    def get_service_info(self, name: str) -> Optional[ServiceInfo]:
        return self.webservices.get(name)
