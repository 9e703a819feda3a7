import asyncio
import unittest

from hls_signed_proxy.resource_store import ResourceStore, new_resource_id, periodic_store_cleanup


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class ResourceStoreTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.store = ResourceStore(ttl=600, clock=self.clock)

    async def test_entry_expires_after_ttl(self):
        await self.store.put("r1", "http://origin.example/a.ts")
        self.clock.now += 1
        self.assertEqual(await self.store.get("r1"), "http://origin.example/a.ts")
        self.clock.now += 600
        self.assertIsNone(await self.store.get("r1"))
        self.assertEqual(len(self.store), 0)

    async def test_unknown_identifier_is_absent(self):
        self.assertIsNone(await self.store.get("missing"))
        self.assertFalse(await self.store.exists("missing"))

    async def test_reads_do_not_refresh_ttl(self):
        await self.store.put("r1", "http://origin.example/a.ts")
        self.clock.now += 500
        self.assertTrue(await self.store.exists("r1"))
        self.clock.now += 101
        self.assertFalse(await self.store.exists("r1"))

    async def test_put_restarts_ttl(self):
        await self.store.put("r1", "http://origin.example/a.ts")
        self.clock.now += 500
        await self.store.put("r1", "http://origin.example/b.ts")
        self.clock.now += 500
        self.assertEqual(await self.store.get("r1"), "http://origin.example/b.ts")

    async def test_evict_expired_items(self):
        await self.store.put("old", "http://origin.example/old.ts")
        self.clock.now += 400
        await self.store.put("new", "http://origin.example/new.ts")
        self.clock.now += 201
        self.assertEqual(await self.store.evict_expired_items(), 1)
        self.assertEqual(len(self.store), 1)
        self.assertTrue(await self.store.exists("new"))

    async def test_concurrent_puts_and_gets_keep_every_entry(self):
        urls = {f"r{i}": f"http://origin.example/seg{i}.ts" for i in range(200)}

        async def put_then_get(resource_id, remote_url):
            await self.store.put(resource_id, remote_url)
            await asyncio.sleep(0)
            return resource_id, await self.store.get(resource_id)

        jobs = [put_then_get(resource_id, remote_url) for resource_id, remote_url in urls.items()]
        jobs += [self.store.evict_expired_items() for _ in range(20)]
        results = await asyncio.gather(*jobs)

        for resource_id, remote_url in results[:len(urls)]:
            self.assertEqual(remote_url, urls[resource_id])
        self.assertEqual(results[len(urls):], [0] * 20)
        self.assertEqual(len(self.store), len(urls))
        for resource_id, remote_url in urls.items():
            self.assertEqual(await self.store.get(resource_id), remote_url)

    async def test_periodic_cleanup_sweeps_expired_entries(self):
        await self.store.put("r1", "http://origin.example/a.ts")
        self.clock.now += 601
        task = asyncio.create_task(periodic_store_cleanup(self.store, interval=3600))
        try:
            for _ in range(3):
                await asyncio.sleep(0)
            self.assertEqual(len(self.store), 0)
        finally:
            task.cancel()


class ResourceIdTests(unittest.TestCase):
    def test_identifiers_are_unique(self):
        ids = {new_resource_id() for _ in range(1000)}
        self.assertEqual(len(ids), 1000)


if __name__ == '__main__':
    unittest.main()
