"""Attachment core domain layer.

Value objects, entities, exceptions and collaborator protocols. No
filesystem or image-library code lives here.
"""

from .exceptions import *
from .value_objects import *
from .entities import *
from .protocols import *
