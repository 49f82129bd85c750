import hashlib
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

import yaml

from incjc.exceptions import ConfigError

DEBUG_VALUES = {"1", "true", "TRUE", "yes", "Y"}
DEFAULT_CONFIG_NAME = ".incjc.yaml"
META_DIR_PREFIX = ".incjc-meta-"
KNOWN_KEYS = {"meta_root", "jdk_home", "classpath", "javac_options", "debug"}

logger = logging.getLogger(__name__)

@dataclass
class BuildConfig:
    """Settings shared by every build attempt.

    Attributes:
        meta_root (Path): Directory holding the per-source-tree metadata directories
        jdk_home (Optional[Path]): Toolchain home; ``bin/`` below it holds javac, javap and jdeps
        extra_classpath (Optional[str]): Classpath appended to every compiler invocation
        javac_options (List[str]): Extra options passed to javac before the classpath
        debug (bool): Whether debug logging is enabled
        source_suffix (str): File suffix identifying compilable sources
    """
    meta_root: Path = field(default_factory=lambda: Path.home())
    jdk_home: Optional[Path] = None
    extra_classpath: Optional[str] = None
    javac_options: List[str] = field(default_factory=list)
    debug: bool = False
    source_suffix: str = ".java"

    def meta_path_for(self, source_dir: str) -> Path:
        """Metadata directory for an absolute source directory path."""
        digest = hashlib.md5(source_dir.encode("utf-8")).hexdigest()
        return self.meta_root / f"{META_DIR_PREFIX}{digest}"

    def jdk_executable(self, name: str) -> str:
        if self.jdk_home is not None:
            return str(self.jdk_home / "bin" / name)
        return name

def _read_config_file(path: Path) -> dict:
    try:
        data = yaml.safe_load(path.read_text())
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    unknown = set(data) - KNOWN_KEYS
    if unknown:
        raise ConfigError(f"Unknown keys in config file {path}: {', '.join(sorted(unknown))}")
    return data

def load_config(config_path: Optional[Path] = None,
                environ: Optional[Mapping[str, str]] = None) -> BuildConfig:
    """Build the configuration from an optional YAML file and the environment.

    The file is taken from ``config_path``, else from ``INCJC_CONFIG``, else
    ``~/.incjc.yaml`` when it exists. Environment variables win over file
    values.

    Args:
        config_path: Explicit configuration file
        environ: Environment to read, defaults to ``os.environ``

    Returns:
        BuildConfig: The merged configuration

    Raises:
        ConfigError: If the file is unreadable or malformed
    """
    env = os.environ if environ is None else environ

    if config_path is None and env.get("INCJC_CONFIG"):
        config_path = Path(env["INCJC_CONFIG"])
    if config_path is None:
        default_path = Path.home() / DEFAULT_CONFIG_NAME
        if default_path.is_file():
            config_path = default_path

    data = _read_config_file(config_path) if config_path is not None else {}
    if config_path is not None:
        logger.debug(f"Loaded config from {config_path}: {data}")

    config = BuildConfig()
    if data.get("meta_root"):
        config.meta_root = Path(data["meta_root"]).expanduser()
    if data.get("jdk_home"):
        config.jdk_home = Path(data["jdk_home"]).expanduser()
    if data.get("classpath"):
        config.extra_classpath = str(data["classpath"])
    options = data.get("javac_options") or []
    if not isinstance(options, list):
        raise ConfigError("javac_options must be a list")
    config.javac_options = [str(opt) for opt in options]
    config.debug = bool(data.get("debug", False))

    if "INCJC_DEBUG" in env:
        config.debug = env["INCJC_DEBUG"] in DEBUG_VALUES
    jdk_home = env.get("JDK_HOME") or env.get("JAVA_HOME")
    if jdk_home:
        config.jdk_home = Path(jdk_home)
    if env.get("CLASSPATH"):
        config.extra_classpath = env["CLASSPATH"]

    return config
