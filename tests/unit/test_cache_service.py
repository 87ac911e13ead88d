"""
Unit tests for the Redis cache service, with the Redis client mocked.
"""

import json
import pytest
from decimal import Decimal

from redis.exceptions import ConnectionError, RedisError

from stockpos.services.cache_service import CacheService


@pytest.fixture
def redis_client(mocker):
    client = mocker.MagicMock()
    client.ping.return_value = True
    return client


@pytest.fixture
def cache(redis_client):
    return CacheService(client=redis_client, prefix='test', default_ttl=60)


class TestCacheAvailability:
    """Tests for enabling and degrading the cache."""

    def test_no_client_is_disabled(self):
        cache = CacheService()

        assert cache.is_available() is False
        assert cache.get('products', 'list:all') is None
        assert cache.set('products', 'list:all', []) is False
        assert cache.invalidate('products') == 0

    def test_disabled_by_config(self, app):
        cache = CacheService(app)

        assert cache.client is None
        assert cache.is_available() is False

    def test_ping_failure(self, cache, redis_client):
        redis_client.ping.side_effect = ConnectionError('down')

        assert cache.is_available() is False
        assert cache.get('products', 'id:1') is None


class TestCacheReadWrite:
    """Tests for get/set/delete."""

    def test_set_records_key_under_tag(self, cache, redis_client):
        pipeline = redis_client.pipeline.return_value

        assert cache.set('products', 'id:1', {'id': 1}, ttl=30) is True

        pipeline.setex.assert_called_once_with('test:products:id:1', 30, json.dumps({'id': 1}))
        pipeline.sadd.assert_called_once_with('test:tag:products', 'test:products:id:1')
        pipeline.execute.assert_called_once()

    def test_set_uses_default_ttl(self, cache, redis_client):
        cache.set('combos', 'list:all', [])

        assert redis_client.pipeline.return_value.setex.call_args[0][1] == 60

    def test_get_restores_decimals(self, cache, redis_client):
        redis_client.get.return_value = cache._serialize({'price': Decimal('15.00')})

        value = cache.get('combos', 'id:3')

        redis_client.get.assert_called_once_with('test:combos:id:3')
        assert value == {'price': Decimal('15.00')}
        assert isinstance(value['price'], Decimal)

    def test_get_miss(self, cache, redis_client):
        redis_client.get.return_value = None
        assert cache.get('products', 'id:1') is None

    def test_get_error_degrades_to_miss(self, cache, redis_client):
        redis_client.get.side_effect = RedisError('boom')
        assert cache.get('products', 'id:1') is None

    def test_delete_removes_from_tag(self, cache, redis_client):
        pipeline = redis_client.pipeline.return_value

        assert cache.delete('products', 'id:1') is True

        pipeline.delete.assert_called_once_with('test:products:id:1')
        pipeline.srem.assert_called_once_with('test:tag:products', 'test:products:id:1')


class TestCacheInvalidation:
    """Tests for tag-based invalidation."""

    def test_deletes_tagged_keys_without_scanning(self, cache, redis_client):
        redis_client.smembers.return_value = {'test:products:id:1', 'test:products:list:all'}
        pipeline = redis_client.pipeline.return_value

        assert cache.invalidate('products') == 2

        redis_client.smembers.assert_called_once_with('test:tag:products')
        redis_client.scan_iter.assert_not_called()
        redis_client.keys.assert_not_called()
        deleted = [c.args for c in pipeline.delete.call_args_list]
        assert sorted(deleted[0]) == ['test:products:id:1', 'test:products:list:all']
        assert deleted[1] == ('test:tag:products',)

    def test_empty_tag(self, cache, redis_client):
        redis_client.smembers.return_value = set()

        assert cache.invalidate('combos') == 0
        redis_client.pipeline.return_value.delete.assert_called_once_with('test:tag:combos')

    def test_error_is_swallowed(self, cache, redis_client):
        redis_client.smembers.side_effect = RedisError('boom')
        assert cache.invalidate('products') == 0


class TestMemoize:
    """Tests for the cache-aside helper."""

    def test_hit_skips_loader(self, cache, redis_client, mocker):
        redis_client.get.return_value = json.dumps([1, 2])
        loader = mocker.Mock()

        assert cache.memoize('products', 'list:all', loader) == [1, 2]
        loader.assert_not_called()

    def test_miss_loads_and_stores(self, cache, redis_client, mocker):
        redis_client.get.return_value = None
        loader = mocker.Mock(return_value=[{'id': 1}])

        assert cache.memoize('products', 'list:all', loader, ttl=120) == [{'id': 1}]
        loader.assert_called_once_with()
        redis_client.pipeline.return_value.setex.assert_called_once_with(
            'test:products:list:all', 120, json.dumps([{'id': 1}])
        )

    def test_loader_errors_propagate(self, cache, redis_client, mocker):
        redis_client.get.return_value = None
        loader = mocker.Mock(side_effect=LookupError('missing'))

        with pytest.raises(LookupError):
            cache.memoize('products', 'id:9', loader)
        redis_client.pipeline.return_value.setex.assert_not_called()
