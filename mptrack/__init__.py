from .client import Client, People, init
from .config import ClientConfig, Settings, load_settings
from .errors import (
    ConfigurationError,
    InvalidArgument,
    MixpanelError,
    NetworkError,
    RemoteRejection,
    ValueCoercionWarning,
)
from .logs import setup_logging
from .models import Endpoint, EventEnvelope, Identity, ProfileEnvelope, ProfileOperation
