"""Django settings assembled from split components.

Components live in ``server/settings/components`` and are included
in order, so later files may rely on names defined by earlier ones.
"""

from split_settings.tools import include

include(
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
)
