"""Attachment application layer: path policy, validators and services."""

from .policies import *
from .validators import *
from .services import *
