"""
Unit tests for PanelService, the per-cycle controller.
"""

import os
import sys
import pytest
from unittest.mock import Mock

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from core.exceptions import DatabaseError, NodeNotFoundError, XrayAPIError
from data.db import Database
from data.models import Node, NodeInfo, UserModel
from data.node_repository import NodeRepository
from service.panel_service import PanelService
from service.sync_service import SyncResult
from service.traffic_service import TrafficReport

NODE = Node(id=5, name="sg-2", traffic_rate=1.5)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestPanelService:

    @pytest.fixture
    def db(self):
        return Mock()

    @pytest.fixture
    def node_repo(self):
        return Mock()

    @pytest.fixture
    def traffic_service(self):
        service = Mock()
        service.collect.side_effect = lambda users, node, report: report
        return service

    @pytest.fixture
    def sync_service(self):
        service = Mock()
        service.sync.side_effect = lambda node_id, provisioned, result: result
        return service

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def panel(self, db, node_repo, traffic_service, sync_service, clock):
        return PanelService(db, NODE, node_repo, traffic_service, sync_service,
                            clock=clock, load_reader=lambda: "0.10 0.20 0.30")

    def test_lost_database_skips_the_cycle(self, panel, db, node_repo, traffic_service, sync_service):
        db.ping.side_effect = DatabaseError("database is locked")

        assert panel.run_cycle() is None

        assert panel.retry_times == 1
        node_repo.create_node_info.assert_not_called()
        node_repo.create_online_log.assert_not_called()
        traffic_service.collect.assert_not_called()
        traffic_service.record.assert_not_called()
        sync_service.sync.assert_not_called()

    def test_retry_counter_grows_then_resets(self, panel, db):
        db.ping.side_effect = [DatabaseError("down"), DatabaseError("down"), None]

        panel.run_cycle()
        panel.run_cycle()
        assert panel.retry_times == 2

        panel.run_cycle()
        assert panel.retry_times == 0

    def test_cycle_runs_every_step_in_order(self, panel, db, node_repo, traffic_service, sync_service, clock):
        order = []
        node_repo.create_node_info.side_effect = lambda info: order.append("heartbeat")
        traffic_service.collect.side_effect = lambda users, node, report: order.append("collect") or report
        traffic_service.record.side_effect = lambda report, node_id: order.append("record")
        sync_service.sync.side_effect = lambda node_id, provisioned, result: order.append("sync") or result
        clock.now += 42

        result = panel.run_cycle()

        assert order == ["heartbeat", "collect", "record", "sync"]
        node_repo.create_node_info.assert_called_once_with(
            NodeInfo(node_id=NODE.id, uptime=42, load="0.10 0.20 0.30")
        )
        collected_users, collected_node, _ = traffic_service.collect.call_args[0]
        assert collected_users is panel.provisioned
        assert collected_node is NODE
        sync_service.sync.assert_called_once()
        assert sync_service.sync.call_args[0][:2] == (NODE.id, panel.provisioned)
        assert result.added == 0 and result.deleted == 0

    def test_cycle_reports_counts(self, panel, traffic_service, sync_service):
        def collect(users, node, report):
            report.online_users = 2
            report.uplink_total = 300
            report.downlink_total = 700
            return report

        def sync(node_id, provisioned, result):
            result.added = 3
            result.deleted = 1
            return result

        traffic_service.collect.side_effect = collect
        sync_service.sync.side_effect = sync

        result = panel.run_cycle()

        assert (result.added, result.deleted, result.online_users) == (3, 1, 2)
        assert (result.uplink_total, result.downlink_total) == (300, 700)

    def test_stats_failure_aborts_accounting_and_sync(self, panel, traffic_service, sync_service, node_repo):
        traffic_service.collect.side_effect = XrayAPIError("stats", "unavailable")

        with pytest.raises(XrayAPIError):
            panel.run_cycle()

        node_repo.create_node_info.assert_called_once()
        traffic_service.record.assert_not_called()
        sync_service.sync.assert_not_called()

    def test_provisioned_set_survives_between_cycles(self, panel, sync_service):
        user = UserModel(id=1, email="a@example.com", vmess_id="x", port=1)

        def sync(node_id, provisioned, result):
            provisioned.add(user)
            return result

        sync_service.sync.side_effect = sync
        panel.run_cycle()
        panel.run_cycle()

        assert list(panel.provisioned) == [user]

    def test_create_loads_node_once(self, db, node_repo, traffic_service, sync_service):
        node_repo.get_node.return_value = NODE

        panel = PanelService.create(db, NODE.id, node_repo, traffic_service, sync_service)

        assert panel.node is NODE
        node_repo.get_node.assert_called_once_with(NODE.id)

    def test_create_propagates_missing_node(self, db, node_repo, traffic_service, sync_service):
        node_repo.get_node.side_effect = NodeNotFoundError(99)

        with pytest.raises(NodeNotFoundError):
            PanelService.create(db, 99, node_repo, traffic_service, sync_service)


def test_unreadable_database_file_trips_the_guard(tmp_path):
    db = Database(str(tmp_path / "panel.db"), pool_size=2)
    db.apply_schema()
    node_repo = NodeRepository(db)
    traffic_service = Mock()
    sync_service = Mock()
    panel = PanelService(db, NODE, node_repo, traffic_service, sync_service,
                         clock=FakeClock(), load_reader=lambda: "0.00 0.00 0.00")

    with open(db.db_file, "r+b") as f:
        header = f.read(4096)
        f.seek(0)
        f.write(b"\0" * len(header))

    try:
        assert panel.run_cycle() is None
        assert panel.retry_times == 1
        traffic_service.collect.assert_not_called()
        sync_service.sync.assert_not_called()
    finally:
        with open(db.db_file, "r+b") as f:
            f.write(header)

    assert db.execute_query("SELECT COUNT(*) AS n FROM ss_node_info") == [{"n": 0}]
    db.close()
