from .base import *  # noqa: F403
from .celery import *  # noqa: F403
from .email import *  # noqa: F403
from .logging import *  # noqa: F403
from .ninja import *  # noqa: F403
from .passes import *  # noqa: F403
