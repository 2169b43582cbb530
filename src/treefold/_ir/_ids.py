"""Sequential node id generation."""

FIRST_ID = "a"


def increment_id(node_id: str) -> str:
    """Return the id following ``node_id`` in base-26 letter order.

    Ids run ``a``, ``b``, ..., ``z``, ``aa``, ``ab``, ..., ``az``, ``ba``, ...,
    ``zz``, ``aaa``. The empty string increments to ``a``.

    Example:
        >>> increment_id("a")
        'b'
        >>> increment_id("z")
        'aa'
        >>> increment_id("az")
        'ba'

    """
    chars = list(node_id)
    i = len(chars) - 1
    while i >= 0:
        if chars[i] != "z":
            chars[i] = chr(ord(chars[i]) + 1)
            return "".join(chars)
        chars[i] = "a"
        i -= 1
    # Every position carried over
    return "a" + "".join(chars)


def id_sort_key(node_id: str) -> tuple[int, str]:
    """Sort key placing ids in the order they were generated.

    Plain string order puts ``aa`` before ``b``; shorter ids were always
    generated first, so length is compared before the letters.
    """
    return (len(node_id), node_id)
