"""Tests for the control loop runner and command line entry point."""

import threading

import pytest

from pnpcontrol.__main__ import CONFIG_ERROR_EXIT_CODE, main
from pnpcontrol.core.config import SystemConfig
from pnpcontrol.core.exceptions import CentroidFileStatus, ConfigurationError
from pnpcontrol.hardware.mock import MockPnPHardware, create_hardware
from pnpcontrol.placement.models import OperationMode, PlacementQueue
from pnpcontrol.sequencer.auto import AutoSequencer
from pnpcontrol.sequencer.manual import ManualSequencer
from pnpcontrol.sequencer.runner import SequencerRunner, create_sequencer
from pnpcontrol.sequencer.state import SequencerState


class TestCreateSequencer:
    """Mode selection"""

    def test_manual(self, hardware, config):
        sequencer = create_sequencer(OperationMode.MANUAL, hardware, PlacementQueue(), config)
        assert isinstance(sequencer, ManualSequencer)

    def test_auto_from_string(self, hardware, config):
        sequencer = create_sequencer("auto", hardware, PlacementQueue(), config)
        assert isinstance(sequencer, AutoSequencer)

    def test_unknown_mode(self, hardware, config):
        with pytest.raises(ValueError):
            create_sequencer("turbo", hardware, PlacementQueue(), config)


class TestSequencerRunner:
    """Loop termination"""

    def test_stop_on_complete(self, hardware, make_queue, config):
        """Test the loop exits once the run completes"""
        runner = SequencerRunner(hardware, make_queue(4), OperationMode.AUTO, config)
        state = runner.run(stop_on_complete=True)
        assert state["sequencer"]["state"] == "COMPLETED"
        assert state["sequencer"]["placed_count"] == 4
        assert state["running"] is False
        assert runner.is_running is False

    def test_max_ticks(self, hardware, make_queue, config):
        """Test the tick limit stops an unfinished run"""
        runner = SequencerRunner(hardware, make_queue(4), OperationMode.AUTO, config)
        state = runner.run(max_ticks=10)
        assert state["timing"]["tick_count"] == 10
        assert state["sequencer"]["finished"] is False

    def test_quit_before_start(self, hardware, make_queue, config):
        """Test a pending quit stops the loop before the first tick"""
        runner = SequencerRunner(hardware, make_queue(1), OperationMode.AUTO, config)
        runner.request_quit()
        state = runner.run()
        assert state["timing"]["tick_count"] == 0
        assert state["quit_requested"] is True
        assert hardware.calls == []

    def test_quit_key_after_completion(self, make_queue, config):
        """Test the loop idles in COMPLETED until the quit key"""
        hardware = MockPnPHardware(keys=["q"])
        runner = SequencerRunner(hardware, make_queue(2), OperationMode.AUTO, config)
        state = runner.run(max_ticks=1000)
        assert state["sequencer"]["state"] == "COMPLETED"
        assert state["quit_requested"] is True
        assert state["timing"]["tick_count"] < 1000
        assert hardware.calls[-1] == ("set_target_pos", (0.0, 0.0))

    def test_manual_scripted_run(self, make_item, config):
        """Test a scripted operator session places one component and quits"""
        hardware = MockPnPHardware(keys=list("2-p----c-----p-----q"))
        queue = PlacementQueue([make_item()])
        runner = SequencerRunner(hardware, queue, OperationMode.MANUAL, config)
        state = runner.run(max_ticks=100)
        assert state["sequencer"]["state"] == "COMPLETED"
        assert state["sequencer"]["placed_count"] == 1
        assert state["quit_requested"] is True

    def test_simulated_time_advances(self, hardware, make_queue):
        """Test the loop sleeps one tick interval between ticks"""
        runner = SequencerRunner(
            hardware, make_queue(1), OperationMode.AUTO, SystemConfig.create_default()
        )
        runner.run(max_ticks=5)
        assert hardware.current_time() == pytest.approx(0.2)

    def test_tick_rate_matches_poll_rate(self, hardware, make_queue):
        """Test reported tick rate is measured on the machine clock"""
        runner = SequencerRunner(
            hardware, make_queue(3), OperationMode.AUTO, SystemConfig.create_default()
        )
        timing = runner.run(max_ticks=20)["timing"]
        assert timing["tick_count"] == 20
        assert timing["tick_rate_hz"] == pytest.approx(20)
        assert timing["avg_interval_ms"] == pytest.approx(50)
        assert timing["elapsed_s"] == pytest.approx(0.95)

    def test_snapshot_waits_for_tick(self, hardware, make_queue, config):
        """Test a state snapshot is not taken while a tick holds the state"""
        runner = SequencerRunner(hardware, make_queue(1), OperationMode.AUTO, config)
        snapshots = []
        reader = threading.Thread(target=lambda: snapshots.append(runner.get_state()))

        with runner._state_lock:
            reader.start()
            reader.join(timeout=0.2)
            assert reader.is_alive()
            assert snapshots == []

        reader.join(timeout=5)
        assert not reader.is_alive()
        assert snapshots[0]["sequencer"]["state"] == "HOME"

    def test_get_state_before_run(self, hardware, make_queue, config):
        runner = SequencerRunner(hardware, make_queue(2), OperationMode.MANUAL, config)
        state = runner.get_state()
        assert state["running"] is False
        assert state["sequencer"]["mode"] == "manual"
        assert state["sequencer"]["state"] == SequencerState.HOME.name
        assert state["sequencer"]["total"] == 2
        assert state["hardware"]["is_mock"] is True


class TestHardwareFactory:
    def test_create_mock(self):
        hardware = create_hardware({"type": "mock", "settle_polls": 1, "keys": ["2"]})
        assert isinstance(hardware, MockPnPHardware)
        assert hardware.settle_polls == 1
        assert hardware.poll_key() == "2"

    def test_simulated_clock_does_not_block(self, monkeypatch):
        """Test the default mock only advances its own clock"""
        sleeps = []
        monkeypatch.setattr("pnpcontrol.hardware.mock.time.sleep", sleeps.append)
        hardware = create_hardware({"type": "mock"})
        hardware.sleep(50)
        assert sleeps == []
        assert hardware.current_time() == pytest.approx(0.05)

    def test_realtime_sleep(self, monkeypatch):
        """Test a realtime mock blocks for each sleep"""
        sleeps = []
        monkeypatch.setattr("pnpcontrol.hardware.mock.time.sleep", sleeps.append)
        hardware = create_hardware({"type": "mock", "realtime": True})
        hardware.sleep(50)
        hardware.sleep(0)
        assert sleeps == [pytest.approx(0.05)]
        assert hardware.current_time() == pytest.approx(0.05)

    def test_unknown_type(self):
        with pytest.raises(ConfigurationError):
            create_hardware({"type": "serial"})

    def test_busy_after_instruction(self):
        """Test an instruction keeps the machine busy for settle_polls polls"""
        hardware = MockPnPHardware(settle_polls=2)
        assert hardware.is_ready()
        hardware.lower_nozzle(1)
        assert not hardware.is_ready()
        assert not hardware.is_ready()
        assert hardware.is_ready()
        assert hardware.get_state()["nozzles"][1]["lowered"] is True


class TestMain:
    """Command line entry point"""

    def test_auto_run(self, centroid_file):
        path = centroid_file(
            {
                "operation_mode": "auto",
                "components": [
                    {"designation": "R1", "x": 1.0, "y": 2.0, "feeder": 1},
                    {"designation": "R2", "x": 3.0, "y": 4.0, "feeder": 0},
                ],
            }
        )
        assert main([str(path), "--exit-on-complete", "--settle-polls", "1", "--no-realtime"]) == 0

    def test_paced_at_poll_rate(self, centroid_file, monkeypatch):
        """Test the command line machine waits one tick interval between ticks"""
        sleeps = []
        monkeypatch.setattr("pnpcontrol.hardware.mock.time.sleep", sleeps.append)
        path = centroid_file(
            {
                "operation_mode": "auto",
                "components": [{"designation": "R1", "x": 1.0, "y": 2.0, "feeder": 1}],
            }
        )
        assert main([str(path), "--max-ticks", "3"]) == 0
        assert sleeps == [pytest.approx(0.05), pytest.approx(0.05)]

    def test_missing_centroid_file(self, tmp_path, capsys):
        """Test the centroid error code becomes the exit status"""
        assert main([str(tmp_path / "missing.yaml")]) == 1
        assert "error code 1" in capsys.readouterr().err

    def test_too_many_components(self, centroid_file):
        path = centroid_file(
            {"components": [{"designation": f"R{i}", "x": 0, "y": 0, "feeder": 0} for i in range(101)]}
        )
        assert main([str(path)]) == 4

    def test_bad_config(self, centroid_file, tmp_path):
        """Test a configuration failure has its own exit status"""
        path = centroid_file({"components": []})
        status = main([str(path), "--config", str(tmp_path / "missing.yaml")])
        assert status == CONFIG_ERROR_EXIT_CODE
        assert status not in {int(code) for code in CentroidFileStatus}
