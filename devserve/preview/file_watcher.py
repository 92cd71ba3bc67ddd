import asyncio
import logging
import os
from pathlib import Path
from typing import Callable, List, Optional
from watchfiles import awatch

logger = logging.getLogger(__name__)

def discover_directories(root: str) -> List[Path]:
    """Depth-first list of ``root`` and every directory below it.

    A directory that cannot be listed is left out together with its subtree.
    Symlinked directories are not followed.
    """
    directories: List[Path] = []

    def walk(path: Path):
        try:
            with os.scandir(path) as entries:
                children = [
                    Path(entry.path) for entry in entries
                    if entry.is_dir(follow_symlinks=False)
                ]
        except OSError as e:
            logger.debug(f"Not watching {path}: {e}")
            return
        directories.append(path)
        for child in sorted(children):
            walk(child)

    walk(Path(root))
    return directories

class FileWatcher:
    """Watches a directory tree and calls ``notify`` on any change.

    The tree is walked once, when ``start`` is called. Each discovered
    directory is watched non-recursively, so directories created later are
    not watched.
    """

    def __init__(self, root: str, notify: Callable[[], None],
                 force_polling: bool = False, step: int = 50):
        self.root = root
        self.notify = notify
        self.force_polling = force_polling
        self.step = step
        self.watched_paths: List[Path] = []
        self._stop_event = asyncio.Event()
        self._task: Optional[asyncio.Task] = None
        
    def start(self) -> asyncio.Task:
        """Walk the tree and start watching it"""
        self.watched_paths = discover_directories(self.root)
        if not self.watched_paths:
            logger.warning(f"Nothing to watch under {self.root}")
        self._task = asyncio.get_running_loop().create_task(self._watch())
        logger.info(f"Watching {len(self.watched_paths)} directories under {self.root}")
        return self._task

    async def _watch(self):
        while self.watched_paths and not self._stop_event.is_set():
            try:
                async for _changes in awatch(
                    *self.watched_paths,
                    watch_filter=None,
                    debounce=self.step,
                    step=self.step,
                    stop_event=self._stop_event,
                    recursive=False,
                    ignore_permission_denied=True,
                    force_polling=self.force_polling or None,
                ):
                    if self._stop_event.is_set():
                        break
                    self.notify()
                return
            except FileNotFoundError as e:
                # A directory vanished between the walk and the watch
                remaining = [path for path in self.watched_paths if path.is_dir()]
                if len(remaining) == len(self.watched_paths):
                    logger.error(f"File watcher stopped: {e}")
                    return
                logger.debug(f"Dropping {len(self.watched_paths) - len(remaining)} vanished directories")
                self.watched_paths = remaining
            except (OSError, RuntimeError) as e:
                if self.force_polling:
                    logger.error(f"File watcher stopped: {e}")
                    return
                # Polling has no per-directory watch limit, every directory stays watched
                logger.warning(f"Native file watching failed ({e}), falling back to polling")
                self.force_polling = True
            
    async def stop(self):
        """Stop watching for changes"""
        self._stop_event.set()
        if self._task is not None:
            await self._task
            self._task = None

def watch(root: str, notify: Callable[[], None], **kwargs) -> FileWatcher:
    """Start watching ``root`` and everything under it"""
    watcher = FileWatcher(root, notify, **kwargs)
    watcher.start()
    return watcher
