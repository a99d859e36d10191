import asyncio
import os
import unittest
from unittest import mock

from mcp.server.fastmcp import FastMCP

from guitar_tuner.server import TRANSPORT_ENV, build_server, get_transport_mode
from guitar_tuner.services.tuner_service import TunerService
from guitar_tuner.session import TuningSession

from helpers import FakeFactory


def make_service():
    return TunerService(TuningSession(factory=FakeFactory(), timeout=0.1))


class TestServer(unittest.TestCase):
    def test_builds_fastmcp_server(self):
        self.assertIsInstance(build_server(make_service()), FastMCP)

    def test_tools_registered(self):
        server = build_server(make_service())
        tools = asyncio.run(server.list_tools())
        self.assertEqual(
            sorted(tool.name for tool in tools),
            ["get_pitch", "list_tunings", "start_tuning", "stop_tuning"],
        )

    def test_start_tuning_takes_tuning_id(self):
        server = build_server(make_service())
        tools = {tool.name: tool for tool in asyncio.run(server.list_tools())}
        properties = tools["start_tuning"].inputSchema["properties"]
        self.assertIn("tuning_id", properties)
        self.assertEqual(properties["tuning_id"].get("default"), "standard")
        self.assertEqual(tools["get_pitch"].inputSchema.get("properties", {}), {})

    def test_tools_have_descriptions(self):
        server = build_server(make_service())
        for tool in asyncio.run(server.list_tools()):
            self.assertTrue(tool.description, tool.name)


class TestTransportMode(unittest.TestCase):
    def test_default_stdio(self):
        with mock.patch.dict(os.environ, {}, clear=False):
            os.environ.pop(TRANSPORT_ENV, None)
            self.assertEqual(get_transport_mode(), "stdio")

    def test_sse(self):
        with mock.patch.dict(os.environ, {TRANSPORT_ENV: " SSE "}):
            self.assertEqual(get_transport_mode(), "sse")

    def test_unknown_falls_back(self):
        with mock.patch.dict(os.environ, {TRANSPORT_ENV: "websocket"}):
            self.assertEqual(get_transport_mode(), "stdio")


if __name__ == "__main__":
    unittest.main()
