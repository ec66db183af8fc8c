from ..config import settings


def remove_overlap(prefix, completion, max_overlap=settings.MAX_OVERLAP):
    """
    Strip the part of ``completion`` that repeats the end of ``prefix``.

    Models often echo the last bit of context before continuing it, e.g.
    prefix ``"function sum("`` and completion ``"function sum(a, b)"``
    gives ``"a, b)"``. The longest matching tail is removed, so a short
    accidental match never wins over a real echo.
    """
    for length in range(min(max_overlap, len(prefix)), 0, -1):
        if completion.startswith(prefix[-length:]):
            return completion[length:]
    return completion
