# SPDX-FileCopyrightText: 2014-2025 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

import struct

from .util import extract_field, uint32

# OUIs used by ESP8266 parts which don't have one burnt into OTP word 3
ESP8266_OUI_0 = (0x18, 0xFE, 0x34)
ESP8266_OUI_1 = (0xAC, 0xD0, 0x74)


def mac_from_two_words(word_a, word_b):
    """Build a MAC from two efuse words.

    word_a holds the 4 low bytes of the MAC, only the bottom 16 bits of
    word_b are MAC (the 2 high bytes). Returns a tuple of 6 ints, MSB first.
    """
    mac_lo = uint32(word_a).uint
    mac_hi = extract_field(word_b, 0, 0xFFFF)
    return tuple(struct.pack(">II", mac_hi, mac_lo)[2:])


def mac_from_otp(mac0, mac1, mac3, loader):
    """Build an ESP8266 MAC from OTP words 0, 1 and 3.

    The OUI comes from word 3 when it is burnt, otherwise word 1 selects one of
    the two Espressif OUIs. An unknown selector is reported on the loader's
    error sink and the OUI bytes are left zeroed.
    """
    oui_sel = extract_field(mac1, 16, 0xFF)
    if uint32(mac3).uint != 0:
        oui = (
            extract_field(mac3, 16, 0xFF),
            extract_field(mac3, 8, 0xFF),
            extract_field(mac3, 0, 0xFF),
        )
    elif oui_sel == 0:
        oui = ESP8266_OUI_0
    elif oui_sel == 1:
        oui = ESP8266_OUI_1
    else:
        loader.error(f"Unknown OUI (selector {oui_sel:#04x})")
        oui = (0, 0, 0)
    return oui + (
        extract_field(mac1, 8, 0xFF),
        extract_field(mac1, 0, 0xFF),
        extract_field(mac0, 24, 0xFF),
    )
