"""Use __init__ to make these not need to be nested under lowercase.Capital"""
from repacker.actions.copy import CopySupervisor, CopyTask
from repacker.actions.repack import Repack, RepackContext, RepackState, next_state
