# SPDX-FileCopyrightText: 2020-2025 Espressif Systems (Shanghai) CO LTD
#
# SPDX-License-Identifier: GPL-2.0-or-later

from .loader import Loader


class EmulatedLoader(Loader):
    """The class for virtual register reads. Using for HOST_TEST.

    Registers live in a dict of address -> 32-bit word, missing addresses
    read as 0. Words are returned exactly as stored, so a transport handing
    out signed values can be mimicked too. Every read address is recorded in
    `reads` and every log sink call in `messages` as (level, message).
    """

    def __init__(self, regs=None, baudrate=115200, fail_on=None, debug=False):
        self.regs = dict(regs or {})
        self.fail_on = dict(fail_on or {})
        self.reads = []
        self.messages = []
        self._baudrate = baudrate
        self._debug = debug

    @property
    def baudrate(self):
        return self._baudrate

    def set_efuse_words(self, base, words):
        """Store consecutive 32-bit words starting at base"""
        for n, word in enumerate(words):
            self.regs[base + (4 * n)] = word

    async def read_reg(self, addr):
        self.reads.append(addr)
        if addr in self.fail_on:
            raise self.fail_on[addr]
        return self.regs.get(addr, 0)

    def _log(self, level, message):
        self.messages.append((level, message))
        if self._debug:
            getattr(super(), level)(message)

    def debug(self, message):
        self._log("debug", message)

    def info(self, message):
        self._log("info", message)

    def warning(self, message):
        self._log("warning", message)

    def error(self, message):
        self._log("error", message)

    def messages_of(self, level):
        return [m for lvl, m in self.messages if lvl == level]
