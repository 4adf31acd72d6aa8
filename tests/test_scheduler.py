from paced_reader.presentation import ManualTimers, Scheduler, Timing


class FakeTarget:
    def __init__(self, count: int, overlap_ms: int = 1000):
        self.count = count
        self.index = 0
        self.rendered = []
        self.timing = Timing(speed_ms=overlap_ms + 500, overlap_ms=overlap_ms)

    def render_current(self):
        self.rendered.append(self.index)

    def has_next(self):
        return self.index < self.count - 1

    def advance(self):
        self.index += 1


def make_scheduler(count=3):
    target = FakeTarget(count)
    timers = ManualTimers()
    return Scheduler(target, timers), target, timers


def test_start_renders_now_and_chains_until_last_chunk():
    scheduler, target, timers = make_scheduler(3)
    scheduler.start()
    assert target.rendered == [0]
    assert scheduler.auto_advancing

    timers.advance(999)
    assert target.rendered == [0]
    timers.advance(1)
    assert target.rendered == [0, 1]
    timers.advance(1000)
    assert target.rendered == [0, 1, 2]

    assert not scheduler.auto_advancing
    assert timers.pending() == []


def test_only_one_live_callback():
    scheduler, target, timers = make_scheduler(5)
    scheduler.start()
    scheduler.start()
    scheduler.start()
    assert len(timers.pending()) == 1
    timers.advance(1000)
    assert target.rendered == [0, 0, 0, 1]
    assert len(timers.pending()) == 1


def test_start_without_auto_advance_renders_once():
    scheduler, target, timers = make_scheduler(3)
    scheduler.start(auto_advance=False)
    timers.advance(10_000)
    assert target.rendered == [0]
    assert timers.pending() == []


def test_stop_invalidates_scheduled_tick():
    scheduler, target, timers = make_scheduler(3)
    scheduler.start()
    token = scheduler.token
    scheduler.stop()
    assert scheduler.token == token + 1
    timers.advance(5000)
    assert target.rendered == [0]
    assert target.index == 0


def test_stop_is_idempotent():
    scheduler, target, timers = make_scheduler(3)
    scheduler.start()
    scheduler.stop()
    first = (scheduler.auto_advancing, scheduler.resume_pending, target.index, len(timers.pending()))
    scheduler.stop()
    second = (scheduler.auto_advancing, scheduler.resume_pending, target.index, len(timers.pending()))
    assert first == second == (False, False, 0, 0)


def test_stale_callback_is_a_noop_when_it_fires_late():
    scheduler, target, timers = make_scheduler(3)
    scheduler.start()
    stale = timers.timers[0]
    scheduler.stop()
    stale.fire()
    assert target.rendered == [0]
    assert target.index == 0
    assert not scheduler.auto_advancing


def test_reschedule_after_speed_change_keeps_index():
    scheduler, target, timers = make_scheduler(4)
    scheduler.start()
    timers.advance(1000)
    assert target.index == 1

    scheduler.reschedule_after_speed_change(2000)
    assert not scheduler.auto_advancing
    assert scheduler.resume_pending
    assert scheduler.active
    assert len(timers.pending()) == 1

    timers.advance(1999)
    assert target.rendered == [0, 1]
    timers.advance(1)
    assert target.rendered == [0, 1, 1]
    assert target.index == 1
    assert scheduler.auto_advancing
    assert not scheduler.resume_pending


def test_reschedule_without_delay_restarts_immediately():
    scheduler, target, timers = make_scheduler(3)
    scheduler.start()
    scheduler.reschedule_after_speed_change(0)
    assert target.rendered == [0, 0]
    assert scheduler.auto_advancing


def test_pending_resume_is_cancelled_by_stop():
    scheduler, target, timers = make_scheduler(3)
    scheduler.start()
    scheduler.reschedule_after_speed_change(2000)
    scheduler.stop()
    timers.advance(10_000)
    assert target.rendered == [0]
    assert not scheduler.active
