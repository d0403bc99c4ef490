"""
Tests for the Netspace facade and the live testing environment hooks.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from netspace.config import NetspaceConfig
from netspace.live_env import (
    add_geosub_root_live_env,
    reset_live_env,
    update_address_live_env,
)
from netspace.models import NodeRecord, NodeService, NodeState
from netspace.netspace import Netspace
from netspace.storage import FileKeyValueStore, MemoryKeyValueStore


ALPHA = "alpha,alpha.example.org,192.168.1.2,2,0,1,k"


@pytest.fixture
def file_config(tmp_path):
    return NetspaceConfig(
        store_live=str(tmp_path / "live"),
        store_test=str(tmp_path / "test"),
    )


@pytest.fixture
def live(file_config):
    return Netspace(file_config)


@pytest.fixture
def testing(file_config):
    return Netspace(file_config.with_overrides(testing=True))


# =============================================================================
# Test: Facade
# =============================================================================

class TestNetspace:

    def test_file_backend_uses_live_dir(self, live, tmp_path):
        assert isinstance(live.gsn.store, FileKeyValueStore)
        live.gsn.register_from_str(ALPHA)
        live.gtn.register_root(NodeRecord.from_str(ALPHA), "esusx")

        assert (tmp_path / "live" / "node_geosub.dat").exists()
        assert (tmp_path / "live" / "node_geotop.dat").exists()

    def test_testing_mode_uses_test_dir(self, testing, tmp_path):
        testing.gsn.register_from_str(ALPHA)
        assert (tmp_path / "test" / "node_geosub.dat").exists()
        assert not (tmp_path / "live").exists()

    def test_memory_backend(self):
        netspace = Netspace(NetspaceConfig(backend="memory"))
        assert isinstance(netspace.gsn.store, MemoryKeyValueStore)
        assert isinstance(netspace.gtn.store, MemoryKeyValueStore)

    def test_registries_do_not_share_entries(self, live):
        node = NodeRecord.from_str(ALPHA)
        live.gtn.register_root(node, "esusx")

        assert live.gsn.list_all() == []
        assert live.gtn.roots_of("esusx")[0].springname == "alpha"

    def test_reset_refused_in_live_mode(self, live):
        live.gsn.register_from_str(ALPHA)
        assert live.reset_for_testing() is False
        assert len(live.gsn.list_all()) == 1

    def test_reset_in_testing_mode(self, testing):
        testing.gsn.register_from_str(ALPHA)
        testing.gtn.register_root(NodeRecord.from_str(ALPHA), "esusx")

        assert testing.reset_for_testing() is True
        assert testing.gsn.list_all() == []
        assert testing.gtn.all_roots() == []

    def test_stats(self, live):
        live.gsn.register_from_str(ALPHA)
        live.gsn.register_from_str("beta,beta.example.org,10.0.0.2,1,0,2,k")
        live.gsn.update(NodeRecord.from_str("beta,beta.example.org,10.0.0.2,1,2,2,k"))
        live.gtn.register_root(NodeRecord.from_str(ALPHA), "esusx")

        stats = live.get_stats()
        assert stats["total_nodes"] == 2
        assert stats["enabled_nodes"] == 1
        assert stats["nodes_by_state"] == {"DISABLED": 1, "ENABLED": 1}
        assert stats["root_registrations"] == 1
        assert stats["geosubs"] == ["esusx"]
        assert stats["testing"] is False


# =============================================================================
# Test: Live testing environment
# =============================================================================

class TestLiveEnv:

    def test_all_hooks_refused_in_live_mode(self, live):
        live.gsn.register_from_str(ALPHA)

        assert reset_live_env(live) is False
        assert update_address_live_env(live, "alpha,alpha.example.org,10.9.9.9,2,0,1,k") is False
        assert add_geosub_root_live_env(live, ALPHA + ",esusx") is False

        assert live.gsn.find_by_identity("alpha").address == "192.168.1.2"
        assert live.gtn.all_roots() == []

    def test_reset_live_env(self, testing):
        testing.gsn.register_from_str(ALPHA)
        assert reset_live_env(testing) is True
        assert testing.gsn.list_all() == []

    def test_update_address_live_env(self, testing):
        testing.gsn.register_from_str(ALPHA)

        assert update_address_live_env(testing, "alpha,alpha.example.org,10.9.9.9,2,0,1,k") is True
        node = testing.gsn.find_by_identity("alpha")
        assert node.address == "10.9.9.9"
        assert node.state == NodeState.DISABLED

    def test_update_address_live_env_unknown_node(self, testing):
        assert update_address_live_env(testing, ALPHA) is False

    def test_update_address_live_env_malformed(self, testing):
        assert update_address_live_env(testing, "alpha") is False

    def test_add_geosub_root_forces_dvsp(self, testing):
        """Description says HTTP; the root is registered as DVSP."""
        assert add_geosub_root_live_env(testing, ALPHA + ",esusx") is True

        root = testing.gtn.root_by_identity("alpha", "esusx")
        assert root.service == NodeService.DVSP
        assert root.host == "alpha.example.org"

    def test_add_geosub_root_empty_geosub(self, testing):
        assert add_geosub_root_live_env(testing, ALPHA + ",") is False
        assert testing.gtn.all_roots() == []

    def test_add_geosub_root_malformed_node(self, testing):
        assert add_geosub_root_live_env(testing, "alpha,esusx") is False
