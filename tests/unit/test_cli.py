"""Unit tests for the command-line helpers"""
# pylint: disable=C0115,C0116
from unittest import TestCase
import pytest
from es_client.exceptions import FailedValidation
from repacker.cli import validate_options


class TestValidateOptions(TestCase):
    def test_defaults(self):
        opts = validate_options({'alias': 'logs', 'number_of_shards': '2'})
        assert opts['number_of_shards'] == 2
        assert opts['number_of_replicas'] == 1
        assert opts['prefix'] == 'repacked-'
        assert opts['compression'] == 'best_compression'
        assert opts['asynchronous'] is True
        assert opts['slices'] == 'auto'
        assert opts['requests_per_second'] == 0
        assert opts['blank_fields'] == []
    def test_nones_pruned(self):
        opts = validate_options(
            {'alias': 'logs', 'number_of_shards': 2, 'mapping_file': None, 'slices': None}
        )
        assert opts['slices'] == 'auto'
        assert opts['mapping_file'] is None
    def test_numeric_slices(self):
        opts = validate_options({'alias': 'logs', 'number_of_shards': 2, 'slices': '4'})
        assert opts['slices'] == 4
    def test_missing_shards(self):
        with pytest.raises(FailedValidation):
            validate_options({'alias': 'logs'})
    def test_negative_throttle(self):
        with pytest.raises(FailedValidation):
            validate_options(
                {'alias': 'logs', 'number_of_shards': 2, 'requests_per_second': -5}
            )
    def test_bad_compression(self):
        with pytest.raises(FailedValidation):
            validate_options({'alias': 'logs', 'number_of_shards': 2, 'compression': 'lz4'})

