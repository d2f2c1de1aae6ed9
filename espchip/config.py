# SPDX-FileCopyrightText: 2014-2025 Espressif Systems (Shanghai) CO LTD,
# other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

import configparser
import os

from .logger import log

CONFIG_OPTIONS = [
    "xtal_warn_threshold",
    "stub_dir",
]


def _validate_config_file(file_path, verbose=False):
    if not os.path.exists(file_path):
        return False

    cfg = configparser.RawConfigParser()
    try:
        cfg.read(file_path, encoding="UTF-8")
        # Only consider it a valid config file if it contains [espchip] section
        if cfg.has_section("espchip"):
            if verbose:
                unknown_opts = list(set(cfg.options("espchip")) - set(CONFIG_OPTIONS))
                unknown_opts.sort()
                no_of_unknown_opts = len(unknown_opts)
                if no_of_unknown_opts > 0:
                    suffix = "s" if no_of_unknown_opts > 1 else ""
                    log.note(
                        "Ignoring unknown config file option{}: {}".format(
                            suffix, ", ".join(unknown_opts)
                        )
                    )
            return True
    except (UnicodeDecodeError, configparser.Error) as e:
        if verbose:
            log.note(f"Ignoring invalid config file {file_path}: {e}")
    return False


def _find_config_file(dir_path, verbose=False):
    for candidate in ("espchip.cfg", "setup.cfg", "tox.ini"):
        cfg_path = os.path.join(dir_path, candidate)
        if _validate_config_file(cfg_path, verbose):
            return cfg_path
    return None


def load_config_file(verbose=False):
    set_with_env_var = False
    cfg_file_path = None
    env_var_path = os.environ.get("ESPCHIP_CFGFILE")
    if env_var_path is not None and _validate_config_file(env_var_path, verbose):
        cfg_file_path = env_var_path
        set_with_env_var = True
    else:
        home_dir = os.path.expanduser("~")
        os_config_dir = (
            f"{home_dir}/.config/espchip"
            if os.name == "posix"
            else f"{home_dir}/AppData/Local/espchip/"
        )
        # Search priority: 1) current dir, 2) OS specific config dir, 3) home dir
        for dir_path in (os.getcwd(), os_config_dir, home_dir):
            cfg_file_path = _find_config_file(dir_path, verbose)
            if cfg_file_path:
                break

    cfg = configparser.ConfigParser()
    cfg["espchip"] = {}  # Create an empty espchip config for when no file is found

    if cfg_file_path is not None:
        # If config file is found and validated, read and parse it
        cfg.read(cfg_file_path)
        if verbose:
            msg = " (set with ESPCHIP_CFGFILE)" if set_with_env_var else ""
            log.print(
                f"Loaded custom configuration from "
                f"{os.path.abspath(cfg_file_path)}{msg}"
            )
    return cfg, cfg_file_path
