"""Single-nozzle sequencer driven by operator key presses.

Keys (case-insensitive):
    0-9  move to that tape feeder (must match the current component)
    p    pick from the feeder, or place once rotated and adjusted
    c    move to the camera and take the photos
    r    rotate the component by the measured pick error
    a    adjust the gantry by the measured preplace error
    h    return home
"""

import logging
from typing import Dict, Optional

from ..hardware.base import PhotoDirection
from ..placement.models import OperationMode
from .base import Handler, Sequencer
from .state import (
    CommandKind,
    CorrectionState,
    NozzleSlot,
    SequencerState,
    TickEvent,
    Transition,
)

logger = logging.getLogger(__name__)

FEEDER_KEYS = frozenset("0123456789")
PICK_KEY = "p"
CAMERA_KEY = "c"
ROTATE_KEY = "r"
ADJUST_KEY = "a"
HOME_KEY = "h"


class ManualSequencer(Sequencer):
    """Operator-driven sequencer using a single nozzle"""

    mode = OperationMode.MANUAL
    reads_keys = True

    def __init__(self, hardware, queue, config=None):
        super().__init__(hardware, queue, config)
        self.nozzle = NozzleSlot(self.machine.manual_nozzle)

    @property
    def correction(self) -> CorrectionState:
        return self.nozzle.correction

    def announce(self) -> None:
        logger.info(
            f"Time: {self.hardware.current_time():7.2f}  Initial state: {self.state.name}  "
            f"Operating in manual control mode, there are {self.total} parts to place"
        )
        self._announce_next_part()

    def _announce_next_part(self) -> None:
        item = self.current_item()
        if item is None:
            logger.info("All components placed - press q to quit")
            return
        logger.info(item.describe(self.progress.placed_count))
        logger.info(f"Select tape feeder {item.feeder} to pick {item.designation}")

    def _build_handlers(self) -> Dict[SequencerState, Handler]:
        return {
            SequencerState.HOME: self._home,
            SequencerState.MOVE_TO_FEEDER: self._move_to_feeder,
            SequencerState.WAIT: self._wait,
            SequencerState.LOWER_NOZZLE: self._lower_nozzle,
            SequencerState.PICK_COMPONENT: self._pick_component,
            SequencerState.RAISE_COMPONENT: self._raise_component,
            SequencerState.MOVE_TO_CAMERA: self._move_to_camera,
            SequencerState.TAKE_UP_PHOTO: self._take_up_photo,
            SequencerState.MOVE_TO_PCB: self._move_to_pcb,
            SequencerState.TAKE_DOWN_PHOTO: self._take_down_photo,
            SequencerState.ROTATE: self._rotate,
            SequencerState.ADJUST: self._adjust,
            SequencerState.LOWER_COMPONENT: self._lower_component,
            SequencerState.PLACE_COMPONENT: self._place_component,
            SequencerState.RAISE_HEAD: self._raise_head,
            SequencerState.COMPLETED: self._completed,
        }

    # ---- states ----
    def _home(self, event: TickEvent) -> Optional[Transition]:
        item = self.current_item()
        if item is None:
            return Transition(SequencerState.WAIT, "No components left to place")

        if event.key not in FEEDER_KEYS:
            return None

        feeder = int(event.key)
        if feeder != item.feeder:
            self._report(
                f"Tape feeder {feeder} does not supply {item.designation}, "
                f"select tape feeder {item.feeder}",
                logging.WARNING,
            )
            return None

        x, y = self.machine.feeder_position(feeder)
        self._issue(CommandKind.SET_TARGET_POS, x, y)
        return Transition(
            SequencerState.MOVE_TO_FEEDER,
            f"Issued instruction to move to tape feeder {feeder}",
        )

    def _move_to_feeder(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        return Transition(SequencerState.WAIT, "Arrived at feeder, press 'P' to pick")

    def _wait(self, event: TickEvent) -> Optional[Transition]:
        c = self.correction
        key = event.key

        if self.current_item() is None:
            return Transition(
                SequencerState.COMPLETED, "All components placed - press q to quit"
            )

        if key == PICK_KEY and not c.picked:
            return Transition(
                SequencerState.LOWER_NOZZLE, "Issued instruction to lower nozzle"
            )

        if (
            key == CAMERA_KEY
            and c.picked
            and not (c.rotated or c.adjusted or c.camera_visited)
        ):
            self._issue(CommandKind.SET_TARGET_POS, *self.machine.camera_position)
            return Transition(
                SequencerState.MOVE_TO_CAMERA, "Issued instruction to move to camera"
            )

        if (
            key == ROTATE_KEY
            and c.needs_rotation
            and not c.rotated
            and c.picked
            and c.camera_visited
        ):
            return Transition(
                SequencerState.ROTATE, "Issued instruction to rotate component"
            )

        if (
            key == ADJUST_KEY
            and c.needs_adjustment
            and not c.adjusted
            and c.picked
            and c.camera_visited
        ):
            return Transition(
                SequencerState.ADJUST, "Issued instruction to adjust position of gantry"
            )

        if key == PICK_KEY and c.ready_to_place:
            return Transition(
                SequencerState.LOWER_COMPONENT, "Issued instruction to lower nozzle"
            )

        # Homing waits for the machine so an in-flight move is not overridden
        if key == HOME_KEY and not c.picked and event.ready:
            self._issue(CommandKind.SET_TARGET_POS, *self.machine.origin)
            return Transition(
                SequencerState.HOME,
                "Issued instruction to return home, select tape feeder to pick from",
            )

        return None

    def _lower_nozzle(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        self._issue(CommandKind.LOWER_NOZZLE, self.nozzle.index)
        return Transition(
            SequencerState.PICK_COMPONENT, "Issued instruction to pick component"
        )

    def _pick_component(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        self._issue(CommandKind.APPLY_VACUUM, self.nozzle.index)
        return Transition(
            SequencerState.RAISE_COMPONENT, "Issued instruction to raise nozzle"
        )

    def _raise_component(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        self._issue(CommandKind.RAISE_NOZZLE, self.nozzle.index)
        self.nozzle.load(self.progress.placed_count)
        self.progress.picked_count += 1
        item = self.current_item()
        return Transition(
            SequencerState.WAIT,
            f"Component {item.designation} picked, press 'C' to move to camera and take photo",
        )

    def _move_to_camera(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        self.correction.camera_visited = True
        return Transition(
            SequencerState.TAKE_UP_PHOTO, "Issued instruction to take photo from below"
        )

    def _take_up_photo(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        c = self.correction
        item = self.current_item()

        self._issue(CommandKind.TAKE_PHOTO, PhotoDirection.UP)
        c.rotation_error = self.hardware.get_pick_error_theta(self.nozzle.index)
        if c.rotation_error == 0:
            c.rotated = True

        self._issue(CommandKind.SET_TARGET_POS, item.x_target, item.y_target)
        return Transition(
            SequencerState.MOVE_TO_PCB,
            f"Rotation error = {c.rotation_error:.2f}, issued instruction to move to "
            f"PCB position x: {item.x_target:.2f} y: {item.y_target:.2f}",
        )

    def _move_to_pcb(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        return Transition(
            SequencerState.TAKE_DOWN_PHOTO, "Issued instruction to take photo from above"
        )

    def _take_down_photo(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        c = self.correction

        self._issue(CommandKind.TAKE_PHOTO, PhotoDirection.DOWN)
        c.x_error = self.hardware.get_preplace_error_x()
        c.y_error = self.hardware.get_preplace_error_y()
        if not c.needs_adjustment:
            c.adjusted = True

        hints = []
        if c.needs_rotation:
            hints.append("press 'R' to rotate")
        if c.needs_adjustment:
            hints.append("press 'A' to adjust gantry")
        if not hints:
            hints.append("press 'P' to place")
        return Transition(
            SequencerState.WAIT,
            f"Photos taken, position error = x: {c.x_error:.2f} y: {c.y_error:.2f}, "
            + ", ".join(hints),
        )

    def _rotate(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        c = self.correction
        angle = self.current_item().theta_target - c.rotation_error
        self._issue(CommandKind.ROTATE_NOZZLE, self.nozzle.index, angle)
        c.rotated = True
        return Transition(
            SequencerState.WAIT, "Component rotated, waiting for next instruction"
        )

    def _adjust(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        c = self.correction
        item = self.current_item()
        self._issue(
            CommandKind.AMEND_POS, item.x_target - c.x_error, item.y_target - c.y_error
        )
        c.adjusted = True
        return Transition(
            SequencerState.WAIT, "Gantry adjusted, waiting for next instruction"
        )

    def _lower_component(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        self._issue(CommandKind.LOWER_NOZZLE, self.nozzle.index)
        return Transition(
            SequencerState.PLACE_COMPONENT, "Issued instruction to place component"
        )

    def _place_component(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        self._issue(CommandKind.RELEASE_VACUUM, self.nozzle.index)
        return Transition(SequencerState.RAISE_HEAD, "Issued instruction to raise nozzle")

    def _raise_head(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        item = self.current_item()
        self._issue(CommandKind.RAISE_NOZZLE, self.nozzle.index)
        self.nozzle.release()
        self.progress.placed_count += 1
        transition = Transition(
            SequencerState.WAIT,
            f"Component {item.designation} placed, waiting for next instruction",
        )
        self._announce_next_part()
        return transition

    def _completed(self, event: TickEvent) -> Optional[Transition]:
        # Idle; keys are only drained so the quit key can be seen
        return None
