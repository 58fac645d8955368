import pandas as pd

from .models import Output


def package(wide: pd.DataFrame | None = None, long: pd.DataFrame | None = None) -> Output:
    """Bundle the final datasets; at least one must be present."""
    if wide is None and long is None:
        raise ValueError("nothing to package: neither a wide nor a long dataset was built")
    return Output(wide=wide, long=long)
