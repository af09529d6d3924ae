#!/usr/bin/env python3
"""
Unit tests for ChatServer command handling and broadcast fan-out.
"""

import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from relay_server.chat.chat_server import ChatServer
from relay_server.chat.registry import Registry, CapacityExceededError
from tests.fakes import make_connection


class ChatServerTestCase(unittest.IsolatedAsyncioTestCase):

    async def asyncSetUp(self):
        self.registry = Registry(capacity=4)
        self.chat_server = ChatServer(self.registry)

    async def add_client(self, fail: bool = False):
        connection = make_connection(self.chat_server.get_next_uid(), fail=fail)
        slot = await self.chat_server.admit_client(connection)
        return slot, connection


class TestBroadcast(ChatServerTestCase):

    async def test_sender_is_excluded(self):
        a_slot, a = await self.add_client()
        _, b = await self.add_client()
        _, c = await self.add_client()

        failed = await self.chat_server.broadcast(b"[x] hi\n", exclude_slot=a_slot)

        self.assertEqual(failed, [])
        self.assertEqual(a.writer.text, "")
        self.assertEqual(b.writer.text, "[x] hi\n")
        self.assertEqual(c.writer.text, "[x] hi\n")

    async def test_failed_recipient_does_not_stop_delivery(self):
        _, a = await self.add_client()
        bad_slot, _ = await self.add_client(fail=True)
        _, c = await self.add_client()

        failed = await self.chat_server.broadcast(b"msg\n")

        self.assertEqual(failed, [bad_slot])
        self.assertEqual(a.writer.text, "msg\n")
        self.assertEqual(c.writer.text, "msg\n")
        # Failing recipient stays admitted until its own read fails
        self.assertIsNotNone(self.registry.get(bad_slot))

    async def test_operator_message_reaches_everyone(self):
        _, a = await self.add_client()
        _, b = await self.add_client()

        failed = await self.chat_server.handle_operator_message("hi")

        self.assertEqual(failed, [])
        self.assertEqual(a.writer.text, "[server] hi\n")
        self.assertEqual(b.writer.text, "[server] hi\n")

    async def test_operator_message_survives_failed_recipient(self):
        bad_slot, _ = await self.add_client(fail=True)
        _, b = await self.add_client()

        failed = await self.chat_server.handle_operator_message("still up")

        self.assertEqual(failed, [bad_slot])
        self.assertEqual(b.writer.text, "[server] still up\n")

    async def test_chat_survives_failed_recipient(self):
        a_slot, a = await self.add_client()
        bad_slot, _ = await self.add_client(fail=True)
        _, c = await self.add_client()

        failed = await self.chat_server.handle_chat(a_slot, a, "hi")

        self.assertEqual(failed, [bad_slot])
        self.assertEqual(a.writer.text, "")
        self.assertEqual(c.writer.text, "[anon1] hi\n")
        self.assertIsNotNone(self.registry.get(bad_slot))

    async def test_chat_from_stale_connection_sends_nothing(self):
        a_slot, a = await self.add_client()
        _, b = await self.add_client()
        await self.chat_server.disconnect_client(a_slot, a)

        self.assertEqual(await self.chat_server.handle_chat(a_slot, a, "hi"), [])
        self.assertEqual(b.writer.text, "")


class TestCommands(ChatServerTestCase):

    async def test_chat_is_attributed_to_sender(self):
        a_slot, a = await self.add_client()
        _, b = await self.add_client()

        await self.chat_server.handle_line(a_slot, a, "hi")

        self.assertEqual(b.writer.text, "[anon1] hi\n")
        self.assertEqual(a.writer.text, "")

    async def test_rename_is_silent_and_used_for_later_chat(self):
        a_slot, a = await self.add_client()
        _, b = await self.add_client()

        await self.chat_server.handle_line(a_slot, a, "NICK bob")
        self.assertEqual(a.writer.text, "")
        self.assertEqual(b.writer.text, "")

        await self.chat_server.handle_line(a_slot, a, "hi")
        self.assertEqual(b.writer.text, "[bob] hi\n")

    async def test_empty_nick_is_rejected_to_requester_only(self):
        a_slot, a = await self.add_client()
        _, b = await self.add_client()

        await self.chat_server.handle_line(a_slot, a, "NICK ")

        self.assertEqual(a.writer.text, "Name cannot be empty")
        self.assertEqual(b.writer.text, "")
        self.assertEqual(self.registry.get(a_slot).name, "anon1")

    async def test_unusable_nick_is_rejected(self):
        a_slot, a = await self.add_client()

        await self.chat_server.handle_line(a_slot, a, "NICK []")

        self.assertEqual(a.writer.text, "Invalid name")
        self.assertEqual(self.registry.get(a_slot).name, "anon1")

    async def test_empty_line_is_ignored(self):
        a_slot, a = await self.add_client()
        _, b = await self.add_client()

        await self.chat_server.handle_line(a_slot, a, "")

        self.assertEqual(b.writer.text, "")

    async def test_rename_does_not_affect_other_senders(self):
        _, a = await self.add_client()
        b_slot, b = await self.add_client()
        c_slot, c = await self.add_client()

        await self.chat_server.handle_line(b_slot, b, "NICK carol")
        await self.chat_server.handle_line(c_slot, c, "hello")

        self.assertEqual(a.writer.text, "[anon3] hello\n")
        self.assertEqual(b.writer.text, "[anon3] hello\n")
        self.assertEqual(c.writer.text, "")

    async def test_lines_from_evicted_connection_are_ignored(self):
        a_slot, a = await self.add_client()
        await self.chat_server.disconnect_client(a_slot, a)
        _, b = await self.add_client()  # takes over slot 0

        await self.chat_server.handle_line(a_slot, a, "ghost")
        await self.chat_server.handle_line(a_slot, a, "NICK ghost")

        self.assertEqual(b.writer.text, "")
        self.assertEqual(self.registry.get(a_slot).name, "anon2")


class TestLifecycle(ChatServerTestCase):

    async def test_admit_reports_capacity(self):
        for _ in range(4):
            await self.add_client()
        with self.assertRaises(CapacityExceededError):
            await self.add_client()
        self.assertEqual(len(self.registry), 4)

    async def test_disconnect_twice_closes_once(self):
        slot, a = await self.add_client()

        await self.chat_server.disconnect_client(slot, a)
        await self.chat_server.disconnect_client(slot, a)

        self.assertEqual(a.writer.close_calls, 1)
        self.assertEqual(len(self.registry), 0)

    async def test_disconnect_all(self):
        connections = [(await self.add_client())[1] for _ in range(3)]

        count = await self.chat_server.disconnect_all()

        self.assertEqual(count, 3)
        self.assertEqual(len(self.registry), 0)
        self.assertTrue(all(conn.writer.close_calls == 1 for conn in connections))
        self.assertTrue(all(conn.writer.wait_closed_calls == 1 for conn in connections))

    async def test_uids_are_unique(self):
        uids = {self.chat_server.get_next_uid() for _ in range(10)}
        self.assertEqual(len(uids), 10)


if __name__ == '__main__':
    unittest.main()
