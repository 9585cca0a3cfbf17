import logging
import signal

log = logging.getLogger(__name__)


class CtrlCHandler:
    """
    Handle Ctrl+C so the capture loop can release the camera before exiting.

    A second Ctrl+C while shutting down falls through to the previous handler
    (normally KeyboardInterrupt).
    """
    def __init__(self):
        self.should_stop = False
        self._previous_handler = signal.signal(signal.SIGINT, self._signal_handler)

    def _signal_handler(self, sig, frame):
        """Callback executed when Ctrl+C is detected"""
        if self.should_stop:
            log.warning("Second interrupt, aborting")
            self.restore()
            signal.raise_signal(signal.SIGINT)
            return
        log.info("Interrupt signal detected, finishing the current frame...")
        self.should_stop = True

    def restore(self):
        """Reinstall the SIGINT handler that was active before this one."""
        if self._previous_handler is not None:
            signal.signal(signal.SIGINT, self._previous_handler)
            self._previous_handler = None
