from .channel import *
from .config import RaceConfig
from .context import Deadline
from .errors import *
from .models import *
from .backends import Backend, BRASILAPI, VIACEP, BACKENDS
from .race import Race, resolve

__version__ = '0.1.0'
