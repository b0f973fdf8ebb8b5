"""
Utility package setup.

Enables pandas Copy-on-Write globally so result frames built from search
records never silently share buffers.
"""

import pandas as pd

pd.options.mode.copy_on_write = True
