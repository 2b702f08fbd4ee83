import ctypes
import importlib
import sys
import xml.etree.ElementTree as ET
from ctypes import CFUNCTYPE, c_int32, c_uint32, c_void_p

import pytest

from ctypesgl_generator import GLRegistry

REGISTRY_XML = """<?xml version="1.0" encoding="UTF-8"?>
<registry>
    <comment>
Copyright 2013-2020 The Khronos Group Inc.
SPDX-License-Identifier: Apache-2.0
    </comment>
    <enums namespace="GL" group="AttribMask">
        <enum value="0x00000100" name="GL_DEPTH_BUFFER_BIT"/>
        <enum value="0x00004000" name="GL_COLOR_BUFFER_BIT"/>
        <enum value="0xFFFFFFFFFFFFFFFF" name="GL_TIMEOUT_IGNORED" type="ull"/>
        <enum value="0x8D65" name="GL_TEXTURE_EXTERNAL_OES" api="gles2"/>
        <unused start="0x0200" end="0x02FF"/>
    </enums>
    <commands namespace="GL">
        <command>
            <proto>void <name>glClear</name></proto>
            <param group="ClearBufferMask"><ptype>GLbitfield</ptype> <name>mask</name></param>
        </command>
        <command>
            <proto><ptype>GLenum</ptype> <name>glGetError</name></proto>
        </command>
        <command>
            <proto>void <name>glBegin</name></proto>
            <param group="PrimitiveType"><ptype>GLenum</ptype> <name>mode</name></param>
        </command>
        <command>
            <proto>void <name>glShaderSource</name></proto>
            <param><ptype>GLuint</ptype> <name>shader</name></param>
            <param><ptype>GLsizei</ptype> <name>count</name></param>
            <param len="count">const <ptype>GLchar</ptype> *const*<name>string</name></param>
            <param len="count">const <ptype>GLint</ptype> *<name>length</name></param>
        </command>
        <command>
            <proto><ptype>GLsync</ptype> <name>glFenceSync</name></proto>
            <param group="SyncCondition"><ptype>GLenum</ptype> <name>condition</name></param>
            <param><ptype>GLbitfield</ptype> <name>flags</name></param>
        </command>
    </commands>
    <feature api="gl" name="GL_VERSION_1_0" number="1.0">
        <require>
            <enum name="GL_DEPTH_BUFFER_BIT"/>
            <enum name="GL_COLOR_BUFFER_BIT"/>
            <command name="glClear"/>
            <command name="glGetError"/>
            <command name="glBegin"/>
        </require>
    </feature>
    <feature api="gl" name="GL_VERSION_3_2" number="3.2">
        <require>
            <enum name="GL_TIMEOUT_IGNORED"/>
            <command name="glShaderSource"/>
            <command name="glFenceSync"/>
        </require>
        <remove profile="core">
            <command name="glBegin"/>
        </remove>
    </feature>
    <feature api="gles2" name="GL_ES_VERSION_2_0" number="2.0">
        <require>
            <enum name="GL_COLOR_BUFFER_BIT"/>
            <enum name="GL_TEXTURE_EXTERNAL_OES"/>
            <command name="glClear"/>
            <command name="glShaderSource"/>
        </require>
    </feature>
    <feature api="glsc2" name="GL_SC_VERSION_2_0" number="2.0">
        <require>
            <command name="glClear"/>
        </require>
    </feature>
</registry>"""


def parse_registry(xml_content: str = REGISTRY_XML, profile: str = "core") -> GLRegistry:
    root = ET.fromstring(xml_content)
    registry = GLRegistry()
    registry.parse_header(root)
    registry.parse_enums(root)
    registry.parse_commands(root)
    registry.parse_features(root, profile)
    return registry


@pytest.fixture
def registry():
    return parse_registry()


@pytest.fixture
def spec(registry):
    return registry.build_spec()


@pytest.fixture
def gl_xml(tmp_path):
    path = tmp_path / "gl.xml"
    path.write_text(REGISTRY_XML)
    return path


class FakeDriver:
    """Native entry points backed by Python callbacks."""

    def __init__(self) -> None:
        self.calls = []
        self.lookups = []
        self.callbacks = {}  # keeps the ctypes callbacks alive
        self.addresses = {}

        self.add("glClear", CFUNCTYPE(None, c_uint32), self._record("glClear"))
        self.add("glGetError", CFUNCTYPE(c_uint32), lambda: 0x0500)
        self.add("glBegin", CFUNCTYPE(None, c_uint32), self._record("glBegin"))
        self.add(
            "glShaderSource",
            CFUNCTYPE(None, c_uint32, c_int32, c_void_p, c_void_p),
            self._record("glShaderSource"),
        )
        self.add("glFenceSync", CFUNCTYPE(c_void_p, c_uint32, c_uint32), lambda condition, flags: 0x1234)

    def _record(self, name):
        def record(*args):
            self.calls.append((name,) + args)

        return record

    def add(self, name, prototype, function):
        callback = prototype(function)
        self.callbacks[name] = callback
        self.addresses[name] = ctypes.cast(callback, c_void_p).value

    def get_proc_address(self, name):
        self.lookups.append(name)
        return self.addresses.get(name)


@pytest.fixture
def fake_driver():
    return FakeDriver()


@pytest.fixture
def import_generated(tmp_path, monkeypatch):
    """Import modules written under ``tmp_path / "out"``."""
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    monkeypatch.syspath_prepend(str(out_dir))

    def _import(name):
        importlib.invalidate_caches()
        return importlib.import_module(name)

    yield _import

    for module in list(sys.modules):
        if module.split(".")[0] in ("gl", "gles"):
            del sys.modules[module]
