"""Auto-login configuration parser built from small parser combinators.

Typical usage::

    from credfile.parser import parse_auto_login

    records = parse_auto_login(Path("~/.netrc").expanduser().read_text())

Sub-modules:

* :mod:`~credfile.parser.combinators` -- generic text-matching building
  blocks (``tag``, ``take_while``, ``sequence``, ``many`` ...).
* :mod:`~credfile.parser.grammar` -- composes the combinators into the
  strict machine/login/password grammar and produces
  :class:`~credfile.models.LoginRecord` objects.
"""

from credfile.parser.grammar import parse_auto_login

__all__ = ["parse_auto_login"]
