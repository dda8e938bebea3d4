import os
import asyncio
import threading
import pytest
from unittest.mock import patch

from services.fileflexor_service.services.cleanup_registry import CleanupRegistry

class TestCleanupRegistry:
    """Test cases for CleanupRegistry"""
    
    @pytest.fixture
    def managed_dir(self, temp_dir):
        directory = temp_dir / "managed"
        directory.mkdir()
        return directory
    
    @pytest.fixture
    def registry(self, managed_dir, fake_clock):
        return CleanupRegistry([managed_dir], orphan_max_age=60.0, clock=fake_clock)
    
    def test_deletes_only_due_entries(self, registry, managed_dir, fake_clock):
        soon = managed_dir / "soon.jpg"
        later = managed_dir / "later.jpg"
        soon.write_bytes(b"1")
        later.write_bytes(b"2")
        
        registry.schedule(soon, 1.0)
        registry.schedule(later, 5.0)
        
        fake_clock.advance(1.0)
        assert registry.sweep() == [soon]
        assert not soon.exists()
        assert later.exists()
        assert list(registry.pending()) == [later]
    
    def test_reschedule_replaces_deadline(self, registry, managed_dir, fake_clock):
        path = managed_dir / "file.pdf"
        path.write_bytes(b"%PDF")
        
        registry.schedule(path, 1.0)
        registry.schedule(path, 10.0)
        
        fake_clock.advance(2.0)
        assert registry.sweep() == []
        assert path.exists()
    
    def test_missing_file_is_dropped_quietly(self, registry, managed_dir, fake_clock):
        registry.schedule(managed_dir / "gone.jpg", 0.0)
        
        assert registry.sweep() == []
        assert registry.pending() == {}
    
    def test_deletion_error_is_logged_not_raised(self, registry, managed_dir, fake_clock, caplog):
        path = managed_dir / "locked.jpg"
        path.write_bytes(b"x")
        registry.schedule(path, 0.0)
        
        with patch("pathlib.Path.unlink", side_effect=PermissionError("denied")):
            assert registry.sweep() == []
        
        assert "Error cleaning up" in caplog.text
        assert registry.pending() == {}
    
    def test_orphans_older_than_max_age_are_reaped(self, registry, managed_dir, fake_clock):
        """Test that files nobody scheduled do not live forever"""
        old = managed_dir / "file-1-1.pdf"
        fresh = managed_dir / "file-2-2.pdf"
        hidden = managed_dir / ".gitkeep"
        for path in (old, fresh, hidden):
            path.write_bytes(b"data")
        
        stale_time = fake_clock.now - 120
        os.utime(old, (stale_time, stale_time))
        os.utime(hidden, (stale_time, stale_time))
        
        assert registry.sweep() == [old]
        assert fresh.exists()
        assert hidden.exists()
    
    def test_scheduled_files_are_not_orphans(self, registry, managed_dir, fake_clock):
        path = managed_dir / "downloaded.jpg"
        path.write_bytes(b"x")
        stale_time = fake_clock.now - 120
        os.utime(path, (stale_time, stale_time))
        
        registry.schedule(path, 5.0)
        
        assert registry.sweep() == []
        fake_clock.advance(5.0)
        assert registry.sweep() == [path]
    
    def test_orphan_reaping_disabled(self, managed_dir, fake_clock):
        registry = CleanupRegistry([managed_dir], orphan_max_age=None, clock=fake_clock)
        path = managed_dir / "old.pdf"
        path.write_bytes(b"x")
        os.utime(path, (0, 0))
        
        assert registry.sweep() == []
    
    def test_missing_directory_is_ignored(self, temp_dir, fake_clock):
        registry = CleanupRegistry([temp_dir / "does-not-exist"], clock=fake_clock)
        
        assert registry.sweep() == []
    
    @pytest.mark.asyncio
    async def test_run_forever_sweeps_until_cancelled(self, registry, managed_dir, fake_clock):
        path = managed_dir / "tmp.webp"
        path.write_bytes(b"x")
        registry.schedule(path, 0.0)
        
        task = asyncio.create_task(registry.run_forever(interval=0.01))
        for _ in range(100):
            if not path.exists():
                break
            await asyncio.sleep(0.01)
        
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        
        assert not path.exists()
    
    @pytest.mark.asyncio
    async def test_run_forever_sweeps_in_worker_thread(self, registry, monkeypatch):
        loop_thread = threading.current_thread()
        sweep_threads = []
        swept = asyncio.Event()
        loop = asyncio.get_running_loop()
        
        def record_sweep(now=None):
            sweep_threads.append(threading.current_thread())
            loop.call_soon_threadsafe(swept.set)
            return []
        
        monkeypatch.setattr(registry, "sweep", record_sweep)
        task = asyncio.create_task(registry.run_forever(interval=0.01))
        await asyncio.wait_for(swept.wait(), timeout=5)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        
        assert sweep_threads
        assert all(thread is not loop_thread for thread in sweep_threads)
    
    def test_schedule_during_sweep_is_kept(self, registry, managed_dir, fake_clock):
        """Test that an entry added while a sweep deletes files survives it"""
        due = managed_dir / "due.jpg"
        late = managed_dir / "late.jpg"
        due.write_bytes(b"1")
        late.write_bytes(b"2")
        registry.schedule(due, 0.0)
        
        original_delete = registry._delete
        
        def delete_and_schedule(path):
            registry.schedule(late, 5.0)
            return original_delete(path)
        
        with patch.object(registry, "_delete", side_effect=delete_and_schedule):
            assert registry.sweep() == [due]
        
        assert list(registry.pending()) == [late]
        assert late.exists()
    
    @pytest.mark.asyncio
    async def test_run_forever_logs_traceback_and_continues(self, registry, monkeypatch, caplog):
        calls = []
        recovered = asyncio.Event()
        loop = asyncio.get_running_loop()
        
        def failing_sweep(now=None):
            calls.append(now)
            if len(calls) == 1:
                raise RuntimeError("disk went away")
            loop.call_soon_threadsafe(recovered.set)
            return []
        
        monkeypatch.setattr(registry, "sweep", failing_sweep)
        task = asyncio.create_task(registry.run_forever(interval=0.01))
        await asyncio.wait_for(recovered.wait(), timeout=5)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        
        records = [r for r in caplog.records if r.getMessage() == "Error in cleanup loop"]
        assert records
        assert records[0].exc_info is not None
        assert "disk went away" in caplog.text
