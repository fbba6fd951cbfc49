# app/models/__init__.py

from .enums import *
from .user import *
from .otp import *
from .product import *
from .order import *
# add all your models here for easy import elsewhere
