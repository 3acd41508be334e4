from . import errors
from . import template_tools
from . import time_tools
from . import line_tools
from . import chat_tools
