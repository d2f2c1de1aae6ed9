# SPDX-FileCopyrightText: 2014-2025 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

from ..util import extract_field
from ..variant import ChipVariant, EfuseField


class ESP32(ChipVariant):
    """Chip descriptor for ESP32"""

    CHIP_NAME = "ESP32"
    IMAGE_CHIP_ID = 0

    SPI_REG_BASE = 0x3FF42000
    SPI_USR_OFFS = 0x1C
    SPI_USR1_OFFS = 0x20
    SPI_USR2_OFFS = 0x24
    SPI_MOSI_DLEN_OFFS = 0x28
    SPI_MISO_DLEN_OFFS = 0x2C
    SPI_W0_OFFS = 0x80

    EFUSE_RD_REG_BASE = 0x3FF5A000
    # MAC is in BLOCK0 words 1 and 2, the top 16 bits of word 2 are CRC
    MAC_EFUSE_REG = EFUSE_RD_REG_BASE + 0x004

    DR_REG_SYSCON_BASE = 0x3FF66000
    APB_CTL_DATE_ADDR = DR_REG_SYSCON_BASE + 0x7C
    APB_CTL_DATE_V = 0x1
    APB_CTL_DATE_S = 31

    UART_CLKDIV_REG = 0x3FF40014

    XTAL_CLK_DIVIDER = 1

    BOOTLOADER_FLASH_OFFSET = 0x1000

    PKG_VERSION_LO = EfuseField(EFUSE_RD_REG_BASE, 3, 9, 0x07)
    PKG_VERSION_HI = EfuseField(EFUSE_RD_REG_BASE, 3, 2, 0x01)
    MINOR_VERSION = EfuseField(EFUSE_RD_REG_BASE, 5, 24, 0x03)
    REV_BIT0 = EfuseField(EFUSE_RD_REG_BASE, 3, 15, 0x01)
    REV_BIT1 = EfuseField(EFUSE_RD_REG_BASE, 5, 20, 0x01)
    ADC_VREF = EfuseField(EFUSE_RD_REG_BASE, 4, 8, 0x1F)
    CODING_SCHEME = EfuseField(EFUSE_RD_REG_BASE, 6, 0, 0x03)

    async def get_pkg_version(self, loader):
        pkg_version = await self.read_field(loader, self.PKG_VERSION_LO)
        pkg_version += await self.read_field(loader, self.PKG_VERSION_HI) << 3
        return pkg_version

    async def get_minor_chip_version(self, loader):
        return await self.read_field(loader, self.MINOR_VERSION)

    async def get_major_chip_version(self, loader):
        rev_bit0 = await self.read_field(loader, self.REV_BIT0)
        rev_bit1 = await self.read_field(loader, self.REV_BIT1)
        apb_ctl_date = await loader.read_reg(self.APB_CTL_DATE_ADDR)
        rev_bit2 = extract_field(apb_ctl_date, self.APB_CTL_DATE_S, self.APB_CTL_DATE_V)
        combine_value = (rev_bit2 << 2) | (rev_bit1 << 1) | rev_bit0

        revision = {
            0: 0,
            1: 1,
            3: 2,
            7: 3,
        }.get(combine_value, 0)
        return revision

    async def get_chip_description(self, loader):
        pkg_version = await self.get_pkg_version(loader)
        major_rev = await self.get_major_chip_version(loader)
        minor_rev = await self.get_minor_chip_version(loader)
        rev3 = major_rev == 3
        # single core, CHIP_VER DIS_APP_CPU
        sc = extract_field(await self.read_efuse(loader, 3), 0, 0x1)

        chip_name = {
            0: "ESP32-S0WDQ6" if sc else "ESP32-D0WDQ6-V3" if rev3 else "ESP32-D0WDQ6",
            1: "ESP32-S0WD" if sc else "ESP32-D0WD-V3" if rev3 else "ESP32-D0WD",
            2: "ESP32-D2WD",
            3: "ESP32-S0WD-OEM" if sc else "ESP32-D0WD-OEM",
            4: "ESP32-U4WDH",
            5: "ESP32-PICO-V3" if rev3 else "ESP32-PICO-D4",
            6: "ESP32-PICO-V3-02",
            7: "ESP32-D0WDR2-V3",
        }.get(pkg_version, "unknown ESP32")

        return f"{chip_name} (revision v{major_rev}.{minor_rev})"

    async def get_chip_features(self, loader):
        features = ["Wi-Fi"]
        word3 = await self.read_efuse(loader, 3)

        # names of variables in this section are lowercase
        #  versions of EFUSE names as documented in TRM and
        # ESP-IDF efuse_reg.h

        chip_ver_dis_bt = extract_field(word3, 1, 0x1)
        if chip_ver_dis_bt == 0:
            features += ["BT"]

        chip_ver_dis_app_cpu = extract_field(word3, 0, 0x1)
        if chip_ver_dis_app_cpu:
            features += ["Single Core"]
        else:
            features += ["Dual Core"]

        chip_cpu_freq_rated = extract_field(word3, 13, 0x1)
        if chip_cpu_freq_rated:
            chip_cpu_freq_low = extract_field(word3, 12, 0x1)
            if chip_cpu_freq_low:
                features += ["160MHz"]
            else:
                features += ["240MHz"]

        pkg_version = await self.get_pkg_version(loader)
        if pkg_version in [2, 4, 5, 6]:
            features += ["Embedded Flash"]

        if pkg_version == 6:
            features += ["Embedded PSRAM"]

        adc_vref = await self.read_field(loader, self.ADC_VREF)
        if adc_vref:
            features += ["VRef calibration in efuse"]

        blk3_part_res = extract_field(word3, 14, 0x1)
        if blk3_part_res:
            features += ["BLK3 partially reserved"]

        coding_scheme = await self.read_field(loader, self.CODING_SCHEME)
        features += [
            "Coding Scheme %s"
            % {
                0: "None",
                1: "3/4",
                2: "Repeat (UNSUPPORTED)",
                3: "None (may contain encoding data)",
            }[coding_scheme]
        ]

        return features
