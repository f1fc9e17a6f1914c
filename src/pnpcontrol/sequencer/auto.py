"""Three-nozzle pipelined sequencer.

A picking pass loads nozzles 0, 1, 2 in turn from the feeder-sorted queue,
then one upward photo measures every loaded component. A placement pass
then rotates, verifies, adjusts and places each loaded nozzle in index
order before the next picking pass starts. The picked count selects the
next component to pick and the placed count selects the target pose, so
both passes walk the same sorted queue.
"""

import logging
from typing import Dict, List, Optional

from ..core.config import SystemDefaults
from ..core.exceptions import SequencerError
from ..hardware.base import PhotoDirection
from ..placement.models import OperationMode
from .base import Handler, Sequencer
from .state import CommandKind, NozzleSlot, SequencerState, TickEvent, Transition

logger = logging.getLogger(__name__)

LAST_NOZZLE = SystemDefaults.NUMBER_OF_NOZZLES - 1


class AutoSequencer(Sequencer):
    """Autonomous sequencer pipelining three nozzles"""

    mode = OperationMode.AUTO

    def __init__(self, hardware, queue, config=None):
        super().__init__(hardware, queue, config)
        self.nozzles: List[NozzleSlot] = [
            NozzleSlot(i) for i in range(SystemDefaults.NUMBER_OF_NOZZLES)
        ]
        self.nozzle_index = 0
        # True once every nozzle used in this pass holds a component
        self.pass_loaded = False
        # Last measured preplace error; shared by every nozzle
        self.preplace_error = (0.0, 0.0)
        self._listed = False
        self._origin_sent = False

    @property
    def active_nozzle(self) -> NozzleSlot:
        return self.nozzles[self.nozzle_index]

    def occupied_nozzles(self) -> List[NozzleSlot]:
        return [slot for slot in self.nozzles if slot.occupied]

    def announce(self) -> None:
        logger.info(
            f"Time: {self.hardware.current_time():7.2f}  Initial state: {self.state.name}  "
            f"Operating in autonomous mode, there are {self.total} parts to place"
        )

    def get_state(self) -> Dict:
        state = super().get_state()
        state.update(
            {
                "nozzle_index": self.nozzle_index,
                "pass_loaded": self.pass_loaded,
                "nozzles": [slot.snapshot() for slot in self.nozzles],
            }
        )
        return state

    def _build_handlers(self) -> Dict[SequencerState, Handler]:
        return {
            SequencerState.HOME: self._home,
            SequencerState.MOVE_TO_FEEDER: self._move_to_feeder,
            SequencerState.WAIT: self._unused,
            SequencerState.LOWER_NOZZLE: self._lower_nozzle,
            SequencerState.PICK_COMPONENT: self._pick_component,
            SequencerState.RAISE_COMPONENT: self._raise_component,
            SequencerState.MOVE_TO_CAMERA: self._unused,
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

    def _list_queue(self) -> None:
        self.queue = self.queue.sorted_by_feeder()
        logger.info(f"Placement order ({self.total} components, sorted by feeder):")
        for line in self.queue.listing():
            logger.info(line)
        self._listed = True

    # ---- states ----
    def _home(self, event: TickEvent) -> Optional[Transition]:
        if not self._listed:
            self._list_queue()

        if self.progress.placed_count == self.total:
            return Transition(SequencerState.COMPLETED, "All components placed")

        if self.pass_loaded:
            slot = next(iter(self.occupied_nozzles()), None)
            if slot is None:
                raise SequencerError("Placement pass started with no loaded nozzle")
            self.nozzle_index = slot.index
            return Transition(
                SequencerState.ROTATE,
                f"Placing component {slot.component} from {slot.name} nozzle",
            )

        if not event.ready:
            return None

        slot = self.active_nozzle
        item = self.queue[self.progress.picked_count]
        feeder_x, feeder_y = self.machine.feeder_position(item.feeder)
        x = feeder_x + self.machine.nozzle_offsets[slot.index]
        self._issue(CommandKind.SET_TARGET_POS, x, feeder_y)
        return Transition(
            SequencerState.MOVE_TO_FEEDER,
            f"Issued instruction to move {slot.name} nozzle to tape feeder "
            f"{item.feeder} for {item.designation}",
        )

    def _move_to_feeder(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        return Transition(SequencerState.LOWER_NOZZLE, "Arrived at tape feeder")

    def _lower_nozzle(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        self._issue(CommandKind.LOWER_NOZZLE, self.nozzle_index)
        return Transition(
            SequencerState.PICK_COMPONENT, "Issued instruction to pick component"
        )

    def _pick_component(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        self._issue(CommandKind.APPLY_VACUUM, self.nozzle_index)
        return Transition(
            SequencerState.RAISE_COMPONENT, "Issued instruction to raise nozzle"
        )

    def _raise_component(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        slot = self.active_nozzle
        self._issue(CommandKind.RAISE_NOZZLE, slot.index)
        slot.load(self.progress.picked_count)
        self.progress.picked_count += 1

        if slot.index == LAST_NOZZLE or self.progress.picked_count == self.total:
            self.pass_loaded = True
            return Transition(
                SequencerState.TAKE_UP_PHOTO,
                f"Nozzles loaded ({len(self.occupied_nozzles())}), "
                "issued instruction to take photo from below",
            )

        self.nozzle_index += 1
        return Transition(
            SequencerState.HOME,
            f"Component {slot.component} picked with {slot.name} nozzle",
        )

    def _take_up_photo(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        self._issue(CommandKind.TAKE_PHOTO, PhotoDirection.UP)
        errors = []
        for slot in self.occupied_nozzles():
            slot.correction.rotation_error = self.hardware.get_pick_error_theta(slot.index)
            slot.correction.camera_visited = True
            errors.append(f"{slot.name}={slot.correction.rotation_error:.2f}")
        self.nozzle_index = 0
        return Transition(
            SequencerState.HOME, f"Photo taken, rotation errors: {', '.join(errors)}"
        )

    def _rotate(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        slot = self.active_nozzle
        if slot.component != self.progress.placed_count:
            raise SequencerError(
                f"{slot.name} nozzle holds component {slot.component}, "
                f"expected {self.progress.placed_count}"
            )
        item = self.current_item()
        angle = item.theta_target - slot.correction.rotation_error
        self._issue(CommandKind.ROTATE_NOZZLE, slot.index, angle)
        slot.correction.rotated = True
        return Transition(
            SequencerState.MOVE_TO_PCB,
            f"Rotated {slot.name} nozzle to {angle:.2f} for {item.designation}",
        )

    def _move_to_pcb(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        item = self.current_item()
        self._issue(CommandKind.SET_TARGET_POS, item.x_target, item.y_target)
        return Transition(
            SequencerState.TAKE_DOWN_PHOTO,
            f"Issued instruction to move to PCB position x: {item.x_target:.2f} "
            f"y: {item.y_target:.2f}",
        )

    def _take_down_photo(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        slot = self.active_nozzle
        self._issue(CommandKind.TAKE_PHOTO, PhotoDirection.DOWN)
        self.preplace_error = (
            self.hardware.get_preplace_error_x(),
            self.hardware.get_preplace_error_y(),
        )
        slot.correction.x_error, slot.correction.y_error = self.preplace_error
        return Transition(
            SequencerState.ADJUST,
            f"Photo taken, position error = x: {self.preplace_error[0]:.2f} "
            f"y: {self.preplace_error[1]:.2f}",
        )

    def _adjust(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        slot = self.active_nozzle
        item = self.current_item()
        # Uses the most recent measurement rather than a per-nozzle one
        x_error, y_error = self.preplace_error
        if x_error != 0 or y_error != 0:
            self._issue(
                CommandKind.AMEND_POS, item.x_target - x_error, item.y_target - y_error
            )
            description = "Gantry adjusted"
        else:
            description = "No adjustment needed"
        slot.correction.adjusted = True
        return Transition(SequencerState.LOWER_COMPONENT, description)

    def _lower_component(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        self._issue(CommandKind.LOWER_NOZZLE, self.nozzle_index)
        return Transition(
            SequencerState.PLACE_COMPONENT, "Issued instruction to place component"
        )

    def _place_component(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        self._issue(CommandKind.RELEASE_VACUUM, self.nozzle_index)
        return Transition(SequencerState.RAISE_HEAD, "Issued instruction to raise nozzle")

    def _raise_head(self, event: TickEvent) -> Optional[Transition]:
        if not event.ready:
            return None
        slot = self.active_nozzle
        item = self.current_item()
        self._issue(CommandKind.RAISE_NOZZLE, slot.index)
        slot.release()
        self.progress.placed_count += 1

        if self.progress.placed_count == self.total:
            return Transition(SequencerState.COMPLETED, "All components placed")

        if slot.index == LAST_NOZZLE or not self.occupied_nozzles():
            self.nozzle_index = 0
            self.pass_loaded = False
            return Transition(
                SequencerState.HOME,
                f"Component {item.designation} placed, starting next picking pass",
            )

        return Transition(
            SequencerState.HOME, f"Component {item.designation} placed"
        )

    def _completed(self, event: TickEvent) -> Optional[Transition]:
        if self._origin_sent or not event.ready:
            return None
        self._issue(CommandKind.SET_TARGET_POS, *self.machine.origin)
        self._origin_sent = True
        self._report("Returning to origin, all components placed - press q to quit")
        return None

    def _unused(self, event: TickEvent) -> Optional[Transition]:
        # Operator-only states; the autonomous cycle never enters them
        return None
