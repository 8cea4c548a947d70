import threading
import traceback


class EvaluationError(Exception):
    """Raised when evaluating an element fails."""


# Settings --------------------------------------------------------------------

def seterr(evaluation=None):
    """Choose what happens when a user function fails during a drive.

    Functions given to :func:`smap`, :func:`sfilter` and the like only run
    once a consumer drives the pipeline, often far from the line which
    assembled it. In `'wrap'` mode their errors are re-raised as an
    :class:`EvaluationError` chained to the original one and pointing at
    the line which created the failing step; in `'passthrough'` mode, the
    default, they propagate unchanged. Either way the drive is aborted and
    resources are released on the way out.

    The setting is per thread.

    Args:
        evaluation (Optional[str]): `'wrap'`, `'passthrough'` or `None` to
            leave the setting unchanged.

    Returns:
        str: The current setting.
    """
    if evaluation == 'wrap':
        error_config.passthrough = False
    elif evaluation == 'passthrough':
        error_config.passthrough = True
    elif evaluation is not None:
        raise ValueError("evaluation must be 'wrap' or 'passthrough'")

    return "passthrough" if error_config.passthrough else 'wrap'


class ErrorConfig(threading.local):
    def __init__(self):
        super().__init__()
        self.passthrough = True


error_config = ErrorConfig()


def reraise_err(item, error, stack_desc=None, where=None):
    """(re)Raise an evaluation error with contextual debug info."""

    msg = "failed to evaluate item {}".format(item)
    if where is not None:
        msg += " in {}".format(where)
    if stack_desc:
        msg += " created at:\n{}".format(stack_desc)

    if isinstance(error, str):
        msg += "\n\noriginal error was:\n{}".format(error)
        raise EvaluationError(msg)

    elif seterr() == "passthrough" or isinstance(error, EvaluationError):
        raise error

    else:
        raise EvaluationError(msg) from error


# Helpers ---------------------------------------------------------------------

def format_stack(skip=1):
    """Describe the calling code, dropping the `skip` innermost callers.

    Combinators call this when they are assembled so that a failure
    during a later drive can point at the line which built the pipeline.
    """
    frames = traceback.extract_stack()[:-(skip + 1)]

    out = ""
    for frame in frames:
        out += "  File \"{}\", line {}, in {}\n".format(
            frame.filename, frame.lineno, frame.name)
        if frame.line:
            out += "    " + frame.line + "\n"

    return out
