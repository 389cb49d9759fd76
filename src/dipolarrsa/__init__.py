"""Interactive random sequential adsorption of dipoles on a line."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("dipolarrsa")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
