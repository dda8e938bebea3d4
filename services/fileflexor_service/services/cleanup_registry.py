import asyncio
import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Set
from pathlib import Path
import logging

logger = logging.getLogger(__name__)

class CleanupRegistry:
    """
    Expiring-entry registry for temporary files
    
    Paths are scheduled for deletion at a deadline and removed by periodic
    sweeps. A sweep also reaps orphans: files in the managed directories that
    were never scheduled and are older than ``orphan_max_age`` seconds, e.g.
    uploads that were never processed or entries lost to a restart.
    
    Sweeps run in a worker thread, so the deadline table is only touched
    under the lock.
    """
    
    def __init__(
        self,
        directories: Iterable[Path],
        orphan_max_age: Optional[float] = 3600.0,
        clock: Callable[[], float] = time.time
    ):
        self.directories = [Path(d) for d in directories]
        self.orphan_max_age = orphan_max_age
        self.clock = clock
        self._deadlines: Dict[Path, float] = {}
        self._lock = threading.Lock()
    
    def schedule(self, path: Path, delay: float) -> float:
        """Schedule a file for deletion after delay seconds, replacing any earlier deadline"""
        deadline = self.clock() + delay
        with self._lock:
            self._deadlines[Path(path)] = deadline
        logger.debug(f"Scheduled {path} for deletion in {delay}s")
        return deadline
    
    def pending(self) -> Dict[Path, float]:
        """Snapshot of scheduled paths and their deadlines"""
        with self._lock:
            return dict(self._deadlines)
    
    def sweep(self, now: Optional[float] = None) -> List[Path]:
        """
        Delete every due entry and every expired orphan
        
        Args:
            now: Reference time, defaults to the registry clock
        
        Returns:
            Paths that were removed
        """
        now = self.clock() if now is None else now
        
        with self._lock:
            due = [path for path, deadline in self._deadlines.items() if deadline <= now]
            for path in due:
                del self._deadlines[path]
            scheduled = set(self._deadlines)
        
        removed = [path for path in due if self._delete(path)]
        
        if self.orphan_max_age is not None:
            for path in self._find_orphans(now, scheduled):
                if self._delete(path):
                    removed.append(path)
        
        return removed
    
    def _find_orphans(self, now: float, scheduled: Set[Path]) -> List[Path]:
        orphans = []
        for directory in self.directories:
            try:
                entries = list(directory.iterdir())
            except FileNotFoundError:
                continue
            
            for path in entries:
                if path.name.startswith('.') or path in scheduled:
                    continue
                try:
                    if not path.is_file():
                        continue
                    if now - path.stat().st_mtime > self.orphan_max_age:
                        orphans.append(path)
                except FileNotFoundError:
                    continue
        return orphans
    
    def _delete(self, path: Path) -> bool:
        try:
            path.unlink()
            logger.info(f"Cleaned up {path.name}")
            return True
        except FileNotFoundError:
            logger.debug(f"Already removed: {path}")
            return False
        except OSError as e:
            logger.error(f"Error cleaning up {path}: {str(e)}")
            return False
    
    async def run_forever(self, interval: float = 1.0):
        """Background sweep loop; filesystem work runs off the event loop"""
        while True:
            try:
                await asyncio.to_thread(self.sweep)
                await asyncio.sleep(interval)
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.exception("Error in cleanup loop")
                await asyncio.sleep(interval)
