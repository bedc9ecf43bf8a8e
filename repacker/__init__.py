"""Shrink and re-index Elasticsearch indices without losing their retention"""
from repacker._version import __version__
from repacker.exceptions import *
from repacker.gateway import ClusterGateway, IndexInfo
from repacker.policy import LifecyclePolicy
from repacker.actions import *
