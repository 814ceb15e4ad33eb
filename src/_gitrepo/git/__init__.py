"""Wrapper functions for git commands.

.. module:: git
    :synopsis: Wrapper functions for git CLI commands, such as clone and
        remote.
"""

from _gitrepo.git._util import (  # NOQA
    GIT_COMMAND,
    GitRunner,
    batch_execution,
)

from _gitrepo.git._fetch import clone  # NOQA

from _gitrepo.git._local import (  # NOQA
    add_remote,
    get_remote_url,
    git_init,
    is_inside_work_tree,
    log,
    status,
)
