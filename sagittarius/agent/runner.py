"""
Entry point and auto-restart wrapper.
"""

import sys
import time

from .constants import AGENT_VERSION
from .config import log, safe_print, load_config, setup_logging, ConfigError
from .listeners import InputListeners, CaptureError
from .app import AgentApp
from . import http_client


def main():
    """Primary agent entry point."""
    safe_print("Sagittarius input stats agent v" + AGENT_VERSION)
    safe_print()

    config = load_config()
    log.info("API URL: %s", config["apiUrl"])

    listeners = InputListeners()
    app = AgentApp(config, listeners.events(), listeners=listeners)

    # Spool goes into the counters before capture begins
    app.restore()
    listeners.start()
    app.run()


def run_with_auto_restart():
    """
    Wrapper that auto-restarts on crash.
    Crash counter resets if the agent ran for 2+ minutes (not a boot-loop).
    Missing config or an unavailable input device is fatal: no restart.
    """
    setup_logging()

    crash_count = 0
    crash_window = 120
    max_rapid_crashes = 10

    while True:
        start_time = time.time()
        try:
            main()
            break
        except KeyboardInterrupt:
            safe_print("\nAgent stopped by user.")
            break
        except (ConfigError, CaptureError) as e:
            log.error("Cannot start: %s", e)
            sys.exit(1)
        except Exception as e:
            elapsed = time.time() - start_time
            log.error("Agent crashed after %.0fs: %s", elapsed, e, exc_info=True)

            if elapsed > crash_window:
                crash_count = 0
            crash_count += 1

            if crash_count >= max_rapid_crashes:
                wait = 120
                log.warning("Many rapid crashes (%d). Waiting %ds...", crash_count, wait)
            else:
                wait = min(10 * crash_count, 60)

            log.info("Restarting in %ds (crash %d)...", wait, crash_count)
            time.sleep(wait)

            http_client.http = http_client.reset_session(http_client.http)
