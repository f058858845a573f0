class SafeDict(dict):
    """
    SafeDict
    --------
    Allow to using partial format strings

    """

    def __missing__(self, key):
        return "{" + key + "}"
