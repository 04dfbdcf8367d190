import jax
jax.config.update('jax_enable_x64', True)

from .errors import *
from .param import *
from .metric import *
from .covfunc import *
from .field import *
from .mesh import *
from .model import *
from .variogram import *
from .interpolate import *
from .krige import *

from . import errors
from . import param
from . import metric
from . import covfunc
from . import field
from . import mesh
from . import model
from . import variogram
from . import interpolate
from . import krige

__version__ = '0.1.0'

__all__ = []
__all__.extend(errors.__all__)
__all__.extend(param.__all__)
__all__.extend(metric.__all__)
__all__.extend(covfunc.__all__)
__all__.extend(field.__all__)
__all__.extend(mesh.__all__)
__all__.extend(model.__all__)
__all__.extend(variogram.__all__)
__all__.extend(interpolate.__all__)
__all__.extend(krige.__all__)
