"""apiresponder.

Usage:
  apiresponder run [--debug] <module>
  apiresponder --version

Options:
  -h --help     Show this screen.
  -v --version  Show version.
  --debug       Log at debug level.

The module may name the API attribute to serve, e.g. ``myapp:api``;
it defaults to ``api``.
"""

import importlib
import logging

import docopt

from .__version__ import __version__

logger = logging.getLogger(__name__)


def load_api(target, default_property="api"):
    module, _, prop = target.partition(":")
    app = importlib.import_module(module)
    return getattr(app, prop or default_property)


def cli(argv=None):
    args = docopt.docopt(
        __doc__, argv=argv, version=__version__, options_first=False
    )

    debug = args["--debug"]
    logging.basicConfig(level=logging.DEBUG if debug else logging.INFO)

    if args["run"]:
        api = load_api(args["<module>"])
        logger.info(f"Loaded {args['<module>']}")
        api.run()
