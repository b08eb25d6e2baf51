# Path and File Name : /home/coinnode/installer/coinnode_installer/build/daemon_build.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Clones or updates the daemon source, builds it and installs it into the install dir

"""
Daemon build: git checkout of the resolved tag, autogen/configure/make/make install.

Failures carry the last lines of the build log plus its path; the full log is
left in place for inspection.
"""

from pathlib import Path

from ..host.runner import tail_file
from ..tasks import StepContext, StepResult

LOG_TAIL = 30


def configure_args(config) -> list:
    bdb = config.paths.bdb_prefix
    return [
        "./configure",
        f"LDFLAGS=-L{bdb}/lib/",
        f"CPPFLAGS=-I{bdb}/include/",
        f"--prefix={config.paths.install_dir}",
        "--disable-tests",
        "--disable-bench",
        "--disable-gui-tests",
        "--with-daemon",
        "--with-utils",
        "--without-gui",
        "--without-miniupnpc",
        "--enable-zmq",
    ]


def build_and_install_daemon(context: StepContext) -> StepResult:
    config = context.config
    profile = config.profile
    runner = context.runner
    source_dir = Path(config.paths.source_dir)
    log_file = Path(config.paths.build_log_dir) / f"{profile.name}-build.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)
    log_file.write_text("")
    version = config.software_version

    def failed(reason: str) -> StepResult:
        return StepResult.failure(reason, log_excerpt=tail_file(log_file, LOG_TAIL), log_path=log_file)

    if (source_dir / ".git").is_dir():
        if not runner.run(["git", "fetch", "--all", "--tags"], cwd=source_dir, log_file=log_file).ok:
            return failed("git fetch failed")
    else:
        if source_dir.exists():
            runner.run(["rm", "-rf", str(source_dir)])
        source_dir.parent.mkdir(parents=True, exist_ok=True)
        if not runner.run(["git", "clone", profile.repo_url, str(source_dir)], log_file=log_file).ok:
            return failed(f"git clone of {profile.repo_url} failed")

    if not runner.run(["git", "checkout", version], cwd=source_dir, log_file=log_file).ok:
        return failed(f"git checkout failed for {version}")

    if not runner.run(["./autogen.sh"], cwd=source_dir, log_file=log_file).ok:
        return failed("autogen.sh failed")

    if not runner.run(configure_args(config), cwd=source_dir, log_file=log_file).ok:
        return failed("configure failed")

    if not runner.run(["make", f"-j{config.build_jobs}"], cwd=source_dir, log_file=log_file).ok:
        return failed("compilation failed")

    if not runner.run(["make", "install"], cwd=source_dir, log_file=log_file).ok:
        return failed("make install failed")

    daemon = Path(config.daemon_path)
    if not daemon.exists():
        return failed(f"{daemon} not found after build")

    log_file.unlink()
    return StepResult.success(f"{profile.display_name} {version} installed to {config.paths.install_dir}")
