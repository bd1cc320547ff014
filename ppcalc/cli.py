from contextlib import contextmanager

import click

from .mod import Mod


class ModsParamType(click.ParamType):
    """Mods given as acronyms like ``HDDT`` or as an integer mask.
    """
    name = 'mods'

    def convert(self, value, param, ctx):
        if isinstance(value, int):
            return value
        if value.isdigit():
            return int(value)

        try:
            return Mod.parse(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


MODS = ModsParamType()


def maybe_show_progress(it, show_progress, **kwargs):
    """Optionally show a progress bar while consuming an iterator.

    Parameters
    ----------
    it : iterable
        The underlying iterator, for example a
        :class:`ppcalc.taiko.TaikoGradualDifficulty`.
    show_progress : bool
        Should progress be shown.
    **kwargs
        Forwarded to the click progress bar.

    Returns
    -------
    itercontext : context manager
        A context manager whose enter is the actual iterator to use.

    Examples
    --------
    .. code-block:: python

       with maybe_show_progress(gradual, True, length=len(gradual)) as it:
            for attributes in it:
                ...
    """
    if show_progress:
        return click.progressbar(it, **kwargs)

    @contextmanager
    def ctx():
        yield it

    return ctx()
