# SPDX-FileCopyrightText: 2014-2025 Fredrik Ahlberg, Angus Gratton,
# Espressif Systems (Shanghai) CO LTD, other contributors as noted.
#
# SPDX-License-Identifier: GPL-2.0-or-later

import json
import re

import pytest

from conftest import need_to_install_package_err, run

try:
    from espchip.emulate import EmulatedLoader
    from espchip.targets import (
        CHIP_DEFS,
        CHIP_LIST,
        ESP32,
        ESP32C3,
        ESP32S2,
        ESP32S3,
        ESP8266,
        get_chip_variant,
    )
    from espchip.util import FatalError, NotSupportedError
    from espchip.variant import EfuseField
except ImportError:
    need_to_install_package_err()

MAC_RE = re.compile("^([0-9a-f]{2}:){5}[0-9a-f]{2}$")

# Word addresses used by the efuse layouts below
C3_B1 = ESP32C3.EFUSE_BLOCK1_ADDR
S2_B1 = ESP32S2.EFUSE_BLOCK1_ADDR
S2_B2 = ESP32S2.EFUSE_BLOCK2_ADDR
S3_B1 = ESP32S3.EFUSE_BLOCK1_ADDR
S3_B2 = ESP32S3.EFUSE_BLOCK2_ADDR


def word(base, n):
    return base + 4 * n


@pytest.mark.host_test
class TestRegistry:
    def test_chip_list(self):
        assert CHIP_LIST == ["esp8266", "esp32", "esp32s2", "esp32s3", "esp32c3"]

    @pytest.mark.parametrize("name", ["esp32s2", "ESP32-S2", "esp32-s2"])
    def test_get_chip_variant(self, name):
        assert isinstance(get_chip_variant(name), ESP32S2)

    def test_unknown_chip(self):
        with pytest.raises(FatalError, match="Unknown chip type 'esp32h2'"):
            get_chip_variant("esp32h2")

    def test_image_chip_ids(self):
        assert ESP8266.IMAGE_CHIP_ID is None
        assert ESP32.IMAGE_CHIP_ID == 0
        assert ESP32S2.IMAGE_CHIP_ID == 2
        assert ESP32C3.IMAGE_CHIP_ID == 5
        assert ESP32S3.IMAGE_CHIP_ID == 9

    @pytest.mark.parametrize("chip", CHIP_LIST)
    def test_variants_are_flat(self, chip):
        cls = CHIP_DEFS[chip]
        for other in CHIP_DEFS.values():
            if other is not cls:
                assert not issubclass(cls, other)


@pytest.mark.host_test
class TestDescriptorBasics:
    @pytest.mark.parametrize("chip", CHIP_LIST)
    def test_read_only(self, chip):
        esp = CHIP_DEFS[chip]()
        with pytest.raises(AttributeError, match="read-only"):
            esp.CHIP_NAME = "ESP32-X"
        with pytest.raises(AttributeError):
            esp.extra = 1
        assert esp.CHIP_NAME == CHIP_DEFS[chip].CHIP_NAME

    @pytest.mark.parametrize("chip", CHIP_LIST)
    def test_erase_size(self, chip):
        esp = CHIP_DEFS[chip]()
        for offset, size in [(0, 0x1000), (0x1000, 0x3000), (0x10000, 0x12345)]:
            assert esp.get_erase_size(offset, size) == size

    @pytest.mark.parametrize("chip", CHIP_LIST)
    def test_mac_format(self, chip):
        loader = EmulatedLoader()
        mac = run(CHIP_DEFS[chip]().read_mac(loader))
        assert MAC_RE.match(mac)

    def test_parse_flash_size_arg(self):
        assert ESP8266.parse_flash_size_arg("4MB") == 0x40
        assert ESP8266.parse_flash_size_arg("2MB-c1") == 0x50
        assert ESP32C3.parse_flash_size_arg("4MB") == 0x20
        assert ESP32S3.parse_flash_size_arg("128MB") == 0x70
        with pytest.raises(FatalError, match="'3MB' is not supported"):
            ESP32.parse_flash_size_arg("3MB")
        with pytest.raises(FatalError, match="Supported sizes: 1MB, 2MB"):
            ESP32.parse_flash_size_arg("512KB")

    @pytest.mark.parametrize("chip", CHIP_LIST)
    def test_flash_size_table_is_read_only(self, chip):
        cls = CHIP_DEFS[chip]
        with pytest.raises(TypeError):
            cls.FLASH_SIZES["3MB"] = 0x01
        with pytest.raises(TypeError):
            del cls.FLASH_SIZES["4MB"]
        assert "3MB" not in cls.FLASH_SIZES
        with pytest.raises(FatalError):
            cls.parse_flash_size_arg("3MB")

    def test_efuse_field_addr(self):
        field = EfuseField(0x60008844, 3, 21, 0x07)
        assert field.addr == 0x60008850
        assert ESP32C3.PKG_VERSION.addr == 0x60008850

    def test_read_failure_propagates(self):
        loader = EmulatedLoader(fail_on={word(C3_B1, 3): TimeoutError("no response")})
        with pytest.raises(TimeoutError, match="no response"):
            run(ESP32C3().get_chip_description(loader))

    def test_field_reads_are_logged(self):
        loader = EmulatedLoader(regs={word(C3_B1, 3): 1 << 21})
        assert run(ESP32C3().get_pkg_version(loader)) == 1
        debug = loader.messages_of("debug")
        assert len(debug) == 1
        assert "0x60008850" in debug[0]


@pytest.mark.host_test
class TestStubImage:
    def write_stub(self, path, **kwargs):
        stub = {"text": "AAEC", "text_start": 0x40380000, "entry": 0x4038001C}
        stub.update(kwargs)
        path.write_text(json.dumps(stub))

    def test_load(self, tmp_path):
        self.write_stub(
            tmp_path / "stub_flasher_32c3.json",
            data="AwQ=",
            data_start=0x3FC96000,
            bss_start=0x3FC9B000,
        )
        stub = ESP32C3.load_stub(stub_dir=str(tmp_path))
        assert stub.text == b"\x00\x01\x02"
        assert stub.text_start == 0x40380000
        assert stub.entry == 0x4038001C
        assert stub.data == b"\x03\x04"
        assert stub.data_start == 0x3FC96000
        assert stub.bss_start == 0x3FC9B000

    def test_no_data_segment(self, tmp_path):
        self.write_stub(tmp_path / "stub_flasher_8266.json")
        stub = ESP8266.load_stub(stub_dir=str(tmp_path))
        assert stub.data is None
        assert stub.data_start is None
        assert stub.bss_start is None

    def test_no_bundled_stubs(self):
        with pytest.raises(FatalError, match="stub_flasher_32c3.json not found"):
            ESP32C3.load_stub()

    def test_missing(self, tmp_path):
        with pytest.raises(FatalError, match="not found"):
            ESP32S3.load_stub(stub_dir=str(tmp_path))

    def test_missing_key(self, tmp_path):
        (tmp_path / "stub_flasher_32s2.json").write_text(json.dumps({"text": "AA=="}))
        with pytest.raises(FatalError, match="is missing"):
            ESP32S2.load_stub(stub_dir=str(tmp_path))

    def test_invalid_json(self, tmp_path):
        (tmp_path / "stub_flasher_32.json").write_text("{not json")
        with pytest.raises(FatalError, match="Invalid flasher stub descriptor"):
            ESP32.load_stub(stub_dir=str(tmp_path))


@pytest.mark.host_test
class TestESP8266:
    def test_description_esp8266ex(self):
        loader = EmulatedLoader()
        esp = ESP8266()
        assert run(esp.get_chip_description(loader)) == "ESP8266EX"
        assert run(esp.get_chip_features(loader)) == ["Wi-Fi"]
        assert loader.reads[:3] == [0x3FF00050, 0x3FF00058, 0x3FF0005C]

    def test_description_esp8285(self):
        # r0_4 and r0_5 set, r3_26 set: 2MB embedded flash, high temperature
        loader = EmulatedLoader(regs={0x3FF00050: 0x30, 0x3FF0005C: 1 << 26})
        esp = ESP8266()
        assert run(esp.get_chip_description(loader)) == "ESP8285H16"
        assert run(esp.get_chip_features(loader)) == ["Wi-Fi", "Embedded Flash"]

    def test_description_esp8285_unknown_flash(self):
        loader = EmulatedLoader(regs={0x3FF00058: 1 << 16})
        assert run(ESP8266().get_chip_description(loader)) == "ESP8285"

    def test_chip_id(self):
        loader = EmulatedLoader(regs={0x3FF00050: 0xDD000000, 0x3FF00054: 0x00BBCCEE})
        assert run(ESP8266().chip_id(loader)) == 0xBBCCEEDD

    def test_mac(self):
        loader = EmulatedLoader(regs={0x3FF00050: 0xDD000000, 0x3FF00054: 0x0001BBCC})
        assert run(ESP8266().read_mac(loader)) == "ac:d0:74:bb:cc:dd"
        assert loader.reads == [0x3FF00050, 0x3FF00054, 0x3FF0005C]

    def test_mac_unknown_oui(self):
        loader = EmulatedLoader(regs={0x3FF00050: 0xDD000000, 0x3FF00054: 0x0007BBCC})
        assert run(ESP8266().read_mac(loader)) == "00:00:00:bb:cc:dd"
        assert len(loader.messages_of("error")) == 1

    def test_no_revision_efuses(self):
        loader = EmulatedLoader()
        esp = ESP8266()
        with pytest.raises(NotSupportedError, match="not supported by ESP8266"):
            run(esp.get_pkg_version(loader))
        with pytest.raises(NotSupportedError):
            run(esp.get_chip_revision(loader))
        assert loader.reads == []

    @pytest.mark.parametrize(
        "clkdiv, expected",
        [
            (694, 40),
            (451, 26),
            (0xFFF00000 | 694, 40),
            (0xFFF00000 | 451, 26),
        ],
    )
    def test_crystal(self, clkdiv, expected):
        loader = EmulatedLoader(regs={0x60000014: clkdiv})
        assert run(ESP8266().get_crystal_freq(loader)) == expected
        assert loader.reads == [0x60000014]
        assert loader.messages_of("warning") == []

    def test_crystal_out_of_range(self):
        # 115200 * 608 / 2 is about 35 MHz
        loader = EmulatedLoader(regs={0x60000014: 608})
        assert run(ESP8266().get_crystal_freq(loader)) == 40
        warnings = loader.messages_of("warning")
        assert len(warnings) == 1
        assert "35.02MHz" in warnings[0]


@pytest.mark.host_test
class TestESP32:
    def test_description(self):
        loader = EmulatedLoader(
            regs={
                0x3FF5A00C: (1 << 9) | (1 << 15),
                0x3FF5A014: (1 << 20) | (1 << 24),
                0x3FF6607C: 0x80000000,
            }
        )
        esp = ESP32()
        assert run(esp.get_chip_description(loader)) == "ESP32-D0WD-V3 (revision v3.1)"
        assert run(esp.get_chip_revision(loader)) == 301
        assert run(esp.get_chip_features(loader)) == [
            "Wi-Fi",
            "BT",
            "Dual Core",
            "Coding Scheme None",
        ]

    def test_description_single_core(self):
        loader = EmulatedLoader(regs={0x3FF5A00C: (1 << 9) | 0x3})
        esp = ESP32()
        assert run(esp.get_chip_description(loader)) == "ESP32-S0WD (revision v0.0)"
        features = run(esp.get_chip_features(loader))
        assert "BT" not in features
        assert "Single Core" in features

    @pytest.mark.parametrize("pkg_lo", [0, 1, 7])
    def test_unknown_package(self, pkg_lo):
        # PKG_VERSION_HI set gives package codes 8 to 15
        loader = EmulatedLoader(regs={0x3FF5A00C: (1 << 2) | (pkg_lo << 9)})
        description = run(ESP32().get_chip_description(loader))
        assert description == "unknown ESP32 (revision v0.0)"
        assert run(ESP32().get_pkg_version(loader)) == 8 + pkg_lo

    def test_crystal(self):
        loader = EmulatedLoader(regs={0x3FF40014: 347})
        assert run(ESP32().get_crystal_freq(loader)) == 40
        assert loader.messages_of("warning") == []

    def test_crystal_26mhz(self):
        loader = EmulatedLoader(regs={0x3FF40014: 56}, baudrate=460800)
        assert run(ESP32().get_crystal_freq(loader)) == 26

    def test_mac(self):
        loader = EmulatedLoader(regs={0x3FF5A004: 0x12345678, 0x3FF5A008: 0xC0FFABCD})
        assert run(ESP32().read_mac(loader)) == "ab:cd:12:34:56:78"
        assert loader.reads == [0x3FF5A004, 0x3FF5A008]


@pytest.mark.host_test
class TestESP32C3:
    def test_description(self):
        loader = EmulatedLoader(
            regs={word(C3_B1, 3): (1 << 21) | (3 << 18) | (1 << 27), word(C3_B1, 4): 1}
        )
        esp = ESP32C3()
        assert run(esp.get_chip_description(loader)) == "ESP8685 (QFN28) (revision v0.3)"
        assert run(esp.get_chip_features(loader)) == [
            "Wi-Fi",
            "BLE",
            "Embedded Flash 4MB (XMC)",
        ]

    def test_revision(self):
        loader = EmulatedLoader(regs={word(C3_B1, 3): 3 << 18, word(C3_B1, 5): 1 << 24})
        esp = ESP32C3()
        assert run(esp.get_chip_revision(loader)) == 103
        assert run(esp.get_minor_chip_version(loader)) == 3
        assert run(esp.get_major_chip_version(loader)) == 1

    def test_minor_version_high_bit(self):
        loader = EmulatedLoader(regs={word(C3_B1, 5): 1 << 23})
        assert run(ESP32C3().get_minor_chip_version(loader)) == 8

    def test_unknown_package(self):
        loader = EmulatedLoader(regs={word(C3_B1, 3): 7 << 21})
        description = run(ESP32C3().get_chip_description(loader))
        assert description == "unknown ESP32-C3 (revision v0.0)"

    def test_no_embedded_flash(self):
        loader = EmulatedLoader()
        assert run(ESP32C3().get_chip_features(loader)) == ["Wi-Fi", "BLE"]

    def test_read_order(self):
        loader = EmulatedLoader()
        run(ESP32C3().get_chip_description(loader))
        assert loader.reads == [
            word(C3_B1, 3),
            word(C3_B1, 5),
            word(C3_B1, 5),
            word(C3_B1, 3),
        ]

    def test_queries_are_repeatable(self):
        loader = EmulatedLoader(regs={word(C3_B1, 3): (2 << 21) | (4 << 18)})
        esp = ESP32C3()
        first = run(esp.get_chip_description(loader))
        reads = len(loader.reads)
        assert run(esp.get_chip_description(loader)) == first
        assert len(loader.reads) == 2 * reads

    def test_crystal_is_fixed(self):
        loader = EmulatedLoader(regs={0x60000014: 451})
        assert run(ESP32C3().get_crystal_freq(loader)) == 40
        assert loader.reads == []

    def test_mac(self):
        loader = EmulatedLoader()
        loader.set_efuse_words(C3_B1, [0x12345678, 0x0000ABCD])
        assert run(ESP32C3().read_mac(loader)) == "ab:cd:12:34:56:78"
        assert loader.reads == [0x60008844, 0x60008848]

    def test_signed_efuse_words(self):
        # pkg 1 and minor 3 with bit 31 set, as handed out by a signed transport
        loader = EmulatedLoader(regs={word(C3_B1, 3): -0x7FD40000})
        assert run(ESP32C3().get_pkg_version(loader)) == 1
        assert run(ESP32C3().get_minor_chip_version(loader)) == 3


@pytest.mark.host_test
class TestESP32S2:
    @pytest.mark.parametrize(
        "word3, name",
        [
            (0, "ESP32-S2"),
            (1 << 21, "ESP32-S2FH2"),
            (2 << 21, "ESP32-S2FH4"),
            (1 << 28, "ESP32-S2R2"),
            ((1 << 28) | (2 << 21), "ESP32-S2FNR2"),
            (3 << 21, "unknown ESP32-S2"),
        ],
    )
    def test_description(self, word3, name):
        loader = EmulatedLoader(regs={word(S2_B1, 3): word3})
        description = run(ESP32S2().get_chip_description(loader))
        assert description == f"{name} (revision v0.0)"

    def test_revision(self):
        loader = EmulatedLoader(regs={word(S2_B1, 3): 1 << 18, word(S2_B1, 4): 2 << 4})
        assert run(ESP32S2().get_chip_revision(loader)) == 102

    def test_features(self):
        loader = EmulatedLoader(regs={word(S2_B1, 3): 1 << 28, word(S2_B2, 4): 1 << 4})
        assert run(ESP32S2().get_chip_features(loader)) == [
            "Wi-Fi",
            "No Embedded Flash",
            "Embedded PSRAM 2MB",
            "ADC and temperature sensor calibration in BLK2 of efuse V1",
        ]

    def test_crystal_is_fixed(self):
        loader = EmulatedLoader()
        assert run(ESP32S2().get_crystal_freq(loader)) == 40
        assert loader.reads == []

    @pytest.mark.parametrize("buf_no", [0x02, 0x102, 0xFFFFFF02])
    def test_post_connect_usb_otg(self, buf_no):
        loader = EmulatedLoader(regs={0x3FFFFD14: buf_no})
        run(ESP32S2().post_connect(loader))
        assert loader.ESP_RAM_BLOCK == 0x800
        assert loader.reads == [0x3FFFFD14]

    @pytest.mark.parametrize("buf_no", [0x00, 0x01, 0x03, 0x200])
    def test_post_connect_uart(self, buf_no):
        loader = EmulatedLoader(regs={0x3FFFFD14: buf_no})
        run(ESP32S2().post_connect(loader))
        assert loader.ESP_RAM_BLOCK == 0x1800

    @pytest.mark.parametrize("chip", ["esp8266", "esp32", "esp32s3", "esp32c3"])
    def test_post_connect_noop(self, chip):
        loader = EmulatedLoader()
        run(CHIP_DEFS[chip]().post_connect(loader))
        assert loader.reads == []
        assert loader.ESP_RAM_BLOCK == 0x1800


@pytest.mark.host_test
class TestESP32S3:
    def test_unknown_package(self):
        loader = EmulatedLoader(regs={word(S3_B1, 3): 2 << 21})
        description = run(ESP32S3().get_chip_description(loader))
        assert description == "unknown ESP32-S3 (revision v0.0)"

    def test_description(self):
        loader = EmulatedLoader(
            regs={word(S3_B1, 3): (1 << 21) | (2 << 18), word(S3_B1, 5): 1 << 24}
        )
        description = run(ESP32S3().get_chip_description(loader))
        assert description == "ESP32-S3-PICO-1 (LGA56) (revision v1.2)"

    def test_eco0_block_version(self):
        regs = {word(S3_B1, 3): 1 << 24, word(S3_B1, 5): 1 << 24}
        loader = EmulatedLoader(regs=regs)
        esp = ESP32S3()
        assert run(esp.get_chip_description(loader)) == "ESP32-S3 (QFN56) (revision v1.0)"

        # block version v1.1 on a v0.0 chip reuses the major version field
        loader = EmulatedLoader(regs=regs)
        loader.regs[word(S3_B2, 4)] = 1
        assert run(esp.get_chip_description(loader)) == "ESP32-S3 (QFN56) (revision v0.0)"
        assert run(esp.get_chip_revision(loader)) == 0

    def test_features(self):
        loader = EmulatedLoader(
            regs={word(S3_B1, 3): 2 << 27, word(S3_B1, 4): 2 | (2 << 3) | (1 << 7)}
        )
        assert run(ESP32S3().get_chip_features(loader)) == [
            "Wi-Fi",
            "BLE",
            "Embedded Flash 4MB (GD)",
            "Embedded PSRAM 2MB (AP_3v3)",
        ]

    def test_psram_cap_high_bit(self):
        loader = EmulatedLoader(regs={word(S3_B1, 5): 1 << 19})
        features = run(ESP32S3().get_chip_features(loader))
        assert features == ["Wi-Fi", "BLE", "Embedded PSRAM 4MB ()"]

    def test_crystal_is_fixed(self):
        loader = EmulatedLoader()
        assert run(ESP32S3().get_crystal_freq(loader)) == 40
        assert loader.reads == []
