"""Catalog of licenses known to the attribution engine.

Each ``License`` member carries its display-name aliases, canonical URL
aliases, the SPDX identifier (where one exists) and the name of the bundled
license text resource. Reverse lookups never raise; anything unrecognized
maps to ``License.UNKNOWN``.
"""

import logging
from enum import Enum
from functools import lru_cache
from importlib.resources import files
from typing import Optional

from license_expression import get_spdx_licensing

logger = logging.getLogger(__name__)

SPDX = get_spdx_licensing()


class License(Enum):
    """Immutable license catalog entry.

    Attributes:
        names: Display-name aliases, first one preferred.
        urls: Canonical URL aliases, first one preferred.
        text_file: Resource name under ``license_attribution.texts``, empty
            when the license has no fixed text.
        spdx_id: SPDX identifier, empty when there is none.
    """

    UNKNOWN = (("Unknown License",), ("",), "", "")
    CUSTOM = (("Custom License",), ("",), "", "")
    COMMERCIAL = (("Commercial License",), ("",), "", "")
    PUBLIC_DOMAIN = (
        ("Public Domain",),
        (
            "http://creativecommons.org/licenses/publicdomain/",
            "http://creativecommons.org/publicdomain/mark/1.0/",
        ),
        "",
        "",
    )
    AFL = (
        (
            'Academic Free License ("AFL") v. 3.0',
            "AFL",
            "AFL 3.0",
            "Academic Free License 3.0",
        ),
        ("http://opensource.org/licenses/afl-3.0",),
        "",
        "AFL-3.0",
    )
    AGPL = (
        (
            "The Affero GPL License",
            "Affero GPL",
            "AGPL",
            "Affero GPL 3",
            "GNU AFFERO GENERAL PUBLIC LICENSE, Version 3 (AGPL-3.0)",
            "GNU AFFERO GENERAL PUBLIC LICENSE, Version 3",
            "GNU AFFERO GENERAL PUBLIC LICENSE (AGPL-3.0)",
            "GNU AFFERO GENERAL PUBLIC LICENSE",
        ),
        (
            "http://www.gnu.org/licenses/agpl.html",
            "http://www.gnu.org/licenses/agpl.txt",
            "http://www.opensource.org/licenses/agpl-v3.html",
            "http://www.opensource.org/licenses/agpl-v3",
            "http://opensource.org/licenses/agpl-v3.html",
            "http://opensource.org/licenses/agpl-v3",
        ),
        "",
        "AGPL-3.0-only",
    )
    # Superseded by APACHE_2, kept so old rules and blobs still resolve
    APACHE_1_1 = (
        (
            "The Apache Software License, Version 1.1",
            "Apache 1.1",
            "Apache Software License, Version 1.1",
            "Apache Software License 1.1",
            "Apache License 1.1",
        ),
        (
            "http://www.apache.org/licenses/LICENSE-1.1",
            "http://www.apache.org/licenses/LICENSE-1.1.txt",
            "http://apache.org/licenses/LICENSE-1.1",
            "http://apache.org/licenses/LICENSE-1.1.txt",
            "http://www.opensource.org/licenses/Apache-1.1",
            "http://opensource.org/licenses/Apache-1.1",
        ),
        "",
        "Apache-1.1",
    )
    APACHE_2 = (
        (
            "The Apache Software License, Version 2.0",
            "Apache 2",
            "Apache 2.0",
            "Apache Software License, Version 2.0",
            "Apache License, Version 2.0",
            "Apache Software License 2.0",
            "Apache License Version 2.0",
            "Apache License 2.0",
        ),
        (
            "http://www.apache.org/licenses/LICENSE-2.0",
            "http://www.apache.org/licenses/LICENSE-2.0.txt",
            "http://www.apache.org/licenses/LICENSE-2.0.html",
            "http://apache.org/licenses/LICENSE-2.0",
            "http://apache.org/licenses/LICENSE-2.0.txt",
            "http://apache.org/licenses/LICENSE-2.0.html",
            "http://www.opensource.org/licenses/Apache-2.0",
            "http://opensource.org/licenses/Apache-2.0",
        ),
        "LICENSE.Apachev2",
        "Apache-2.0",
    )
    BSD_2 = (
        (
            'BSD 2-Clause "Simplified" or "FreeBSD" license',
            "BSD 2",
            "BSD 2-Clause License",
            "FreeBSD",
            "FreeBSD License",
            "Simplified BSD License",
        ),
        (
            "http://opensource.org/licenses/BSD-2-Clause",
            "http://opensource.org/licenses/bsd-license",
        ),
        "LICENSE.BSD2",
        "BSD-2-Clause",
    )
    BSD_3 = (
        (
            "BSD 3-Clause License",
            "BSD",
            "BSD 3",
            "BSD License",
            "BSD 3 License",
            "New BSD License",
            "Revised BSD License",
            "BSD 3-Clause",
            'BSD 3-Clause "New" or "Revised" license',
        ),
        (
            "http://opensource.org/licenses/BSD-3-Clause",
            "http://asm.objectweb.org/license.html",
            "http://asm.ow2.org/license.html",
            "http://antlr.org/license.html",
        ),
        "LICENSE.BSD3",
        "BSD-3-Clause",
    )
    BSL = (
        (
            "Boost Software License 1.0 (BSL-1.0)",
            "Boost",
            "BSL",
            "BSL-1.0",
            "BSL 1.0",
            "Boost Software License Version 1.0",
            "Boost Software License 1.0",
        ),
        (
            "http://www.opensource.org/licenses/BSL-1.0",
            "http://opensource.org/licenses/BSL-1.0",
        ),
        "LICENSE.BSL",
        "BSL-1.0",
    )
    CC0 = (
        (
            "Public Domain, per Creative Commons CC0",
            "CC0",
            "CC0 1.0 Universal",
        ),
        ("http://creativecommons.org/publicdomain/zero/1.0/",),
        "LICENSE.CC0",
        "CC0-1.0",
    )
    # Superseded by CC_BY_3
    CC_BY_25 = (
        (
            "Creative Commons Attribution (CC-A) 2.5",
            "CC-BY 2.5",
            "CC-A 2.5",
            "Attribution 2.5 Generic (CC BY 2.5)",
        ),
        ("https://creativecommons.org/licenses/by/2.5/legalcode",),
        "",
        "CC-BY-2.5",
    )
    CC_BY_3 = (
        (
            "Creative Commons Attribution (CC-A) 3.0",
            "CC-A 3.0",
            "CC-A",
            "CC-BY 3",
            "CC-BY 3.0",
            "Attribution 3.0 Unported (CC BY 3.0)",
        ),
        ("https://creativecommons.org/licenses/by/3.0/legalcode",),
        "",
        "CC-BY-3.0",
    )
    CDDL = (
        (
            "Common Development and Distribution License",
            "CDDL",
            "Common Development and Distribution License (CDDL)",
            "CDDL License",
            "COMMON DEVELOPMENT AND DISTRIBUTION LICENSE (CDDL) Version 1.0",
        ),
        ("http://opensource.org/licenses/CDDL-1.0",),
        "",
        "CDDL-1.0",
    )
    CDDL_1_1 = (
        (
            "Common Development and Distribution License Version 1.1",
            "CDDL 1.1",
            "Common Development and Distribution License (CDDL 1.1)",
            "CDDL License v1.1",
            "COMMON DEVELOPMENT AND DISTRIBUTION LICENSE (CDDL) Version 1.1",
        ),
        ("https://javaee.github.io/glassfish/LICENSE",),
        "",
        "CDDL-1.1",
    )
    # Superseded by EPL
    CPL = (
        ("Common Public License Version 1.0", "CPL"),
        ("http://www.opensource.org/licenses/cpl1.0.txt",),
        "",
        "CPL-1.0",
    )
    EDL = (
        (
            "Eclipse Distribution License (EDL)",
            "EDL",
            "EDL 1.0",
            "Eclipse Distribution License",
            "Eclipse Distribution License - v 1.0",
        ),
        ("http://www.eclipse.org/org/documents/edl-v10.html",),
        "",
        "",
    )
    EPL = (
        (
            "Eclipse Public License (EPL)",
            "EPL",
            "EPL 1.0",
            "Eclipse Public License",
            "Eclipse Public License - v 1.0",
            "Eclipse Public License Version 1.0",
        ),
        (
            "http://www.eclipse.org/legal/epl-v10.html",
            "http://opensource.org/licenses/EPL-1.0",
            "http://www.opensource.org/licenses/EPL-1.0",
            "http://opensource.org/licenses/eclipse-1.0.txt",
        ),
        "LICENSE.EPL",
        "EPL-1.0",
    )
    GPLv2 = (
        (
            "GNU General Public License, version 2",
            "GPLv2",
            "GNU General Public License (GPLv2)",
            "The GNU General Public License, Version 2",
        ),
        (
            "http://www.gnu.org/licenses/gpl-2.0.txt",
            "http://opensource.org/licenses/GPL-2.0",
        ),
        "LICENSE.GPLv2",
        "GPL-2.0-only",
    )
    GPLv2_CLASSPATH = (
        (
            "GNU General Public License, version 2, with the Classpath Exception",
            "GPLv2, with the Classpath Exception",
            "GNU General Public License (GPLv2), with the Classpath Exception",
            "The GNU General Public License, Version 2, with the Classpath Exception",
        ),
        ("https://www.gnu.org/software/classpath/license.html",),
        "",
        "GPL-2.0-only WITH Classpath-exception-2.0",
    )
    GPLv3 = (
        (
            "GNU General Public License, version 3",
            "GPL",
            "GPLv3",
            "GNU General Public License (GPLv3)",
            "The GNU General Public License, Version 3",
        ),
        (
            "http://www.gnu.org/licenses/gpl-3.0.txt",
            "http://opensource.org/licenses/GPL-3.0",
        ),
        "LICENSE.GPLv3",
        "GPL-3.0-only",
    )
    GPLv3_CLASSPATH = (
        (
            "GNU General Public License, version 3, with the Classpath Exception",
            "GPLv3, with the Classpath Exception",
            "GNU General Public License (GPLv3), with the Classpath Exception",
            "The GNU General Public License, Version 3, with the Classpath Exception",
        ),
        ("https://www.gnu.org/software/classpath/license.html",),
        "",
        "GPL-3.0-only WITH Classpath-exception-2.0",
    )
    ICU = (
        ("ICU License", "ICU"),
        (
            "http://source.icu-project.org/repos/icu/icu/branches/maint/maint-4-8/license.html",
        ),
        "",
        "ICU",
    )
    ISC = (
        ("ISC License", "ISC"),
        ("http://opensource.org/licenses/ISC",),
        "LICENSE.ISC",
        "ISC",
    )
    JSON = (
        ("The JSON License",),
        ("http://www.json.org/license.html",),
        "LICENSE.JSON",
        "JSON",
    )
    LGPLv2_1 = (
        (
            "GNU Lesser General Public License, version 2.1",
            "LGPL-2.1",
            "LGPL 2.1",
            "GNU Library General Public License, version 2.1",
            "GNU Library General Public License (LGPL-2.1)",
            "GNU Lesser General Public License (LGPL-2.1)",
            'GNU "Lesser" General Public License, version 2.1',
            'GNU "Lesser" General Public License (LGPL-2.1)',
            'GNU Library or "Lesser" General Public License, version 2.1',
            'GNU Library or "Lesser" General Public License (LGPL-2.1)',
            "GNU Lesser Public License, version 2.1",
        ),
        (
            "http://www.gnu.org/licenses/old-licenses/lgpl-2.1.html",
            "https://opensource.org/licenses/LGPL-2.1",
        ),
        "LICENSE.LGPLv2.1",
        "LGPL-2.1-only",
    )
    LGPLv3 = (
        (
            "GNU Lesser General Public License, version 3",
            "LGPL-3",
            "LGPL 3",
            "GNU Lesser General Public License (LGPL-3)",
            'GNU "Lesser" General Public License, version 3',
            'GNU Library or "Lesser" General Public License, version 3',
            "GNU Lesser Public License, version 3",
        ),
        (
            "http://www.gnu.org/licenses/lgpl-3.0.html",
            "http://www.gnu.org/licenses/lgpl.html",
            "http://opensource.org/licenses/LGPL-3.0",
        ),
        "LICENSE.LGPLv3",
        "LGPL-3.0-only",
    )
    MIT = (
        (
            "MIT License",
            "MIT",
            "X11",
            "X11 License",
            "MIT/X Consortium License",
            "Expat License",
            "Bouncy Castle Licence",
            "The PostgreSQL License",
        ),
        (
            "http://opensource.org/licenses/MIT",
            "http://www.opensource.org/licenses/MIT",
            "https://www.bouncycastle.org/licence.html",
            "http://www.postgresql.org/about/licence/",
        ),
        "LICENSE.MIT",
        "MIT",
    )
    # Alias of MIT; older blobs carry this member name
    MIT_X11 = MIT
    # Superseded by MOZILLA_2
    MOZILLA_1_1 = (
        (
            "Mozilla Public License 1.1",
            "MPL-1.1",
            "Mozilla Public License, Version 1.1",
        ),
        (
            "http://opensource.org/licenses/MPL-1.1",
            "http://www.mozilla.org/media/MPL/1.1/index.txt",
        ),
        "LICENSE.MPLv1.1",
        "MPL-1.1",
    )
    MOZILLA_2 = (
        (
            "Mozilla Public License 2.0",
            "MPL-2",
            "MPL 2.0",
            "Mozilla Public License, Version 2.0",
        ),
        (
            "http://opensource.org/licenses/MPL-2.0",
            "http://www.mozilla.org/MPL/2.0/index.txt",
            "https://www.mozilla.org/en-US/MPL/2.0/",
        ),
        "LICENSE.MPLv2",
        "MPL-2.0",
    )
    MS_PL = (
        (
            "Microsoft Public License (MS-PL)",
            "MS-PL",
            "Microsoft Public License",
        ),
        (
            "http://opensource.org/licenses/ms-pl.html",
            "http://opensource.org/licenses/MS-PL",
        ),
        "",
        "MS-PL",
    )
    NCSA = (
        (
            "The University of Illinois/NCSA Open Source License (NCSA)",
            "NCSA",
            "UoI-NCSA",
            "The University of Illinois/NCSA Open Source License",
            "University of Illinois/NCSA Open Source License (NCSA)",
            "University of Illinois/NCSA Open Source License",
        ),
        ("http://opensource.org/licenses/UoI-NCSA.php",),
        "",
        "NCSA",
    )
    OFL = (
        ("Open Font License", "SIL Open Font License 1.1", "OFL-1.1"),
        (
            "http://scripts.sil.org/OFL",
            "http://opensource.org/licenses/OFL-1.1",
        ),
        "",
        "OFL-1.1",
    )
    OLDAP = (
        (
            "The OpenLDAP Public License",
            "OpenLDAP Public License",
            "OpenLDAP Public License v2.8",
            "OLDAP",
            "OLDAP-2.8",
        ),
        ("http://www.openldap.org/software/release/license.html",),
        "",
        "OLDAP-2.8",
    )
    OSGI = (
        ("OSGi Specification License, Version 2.0",),
        ("http://www.osgi.org/Specifications/Licensing",),
        "",
        "",
    )
    PHP_3_1 = (
        (
            "The PHP License, version 3.01",
            "PHP License 3.01",
            "PHP License, version 3.01",
        ),
        ("http://php.net/license/3_01.txt",),
        "",
        "PHP-3.01",
    )
    PYTHON = (
        (
            "Python License, Version 2 (Python-2.0)",
            "Python",
            "Python-2.0",
            "Python License",
            "Python License 2.0",
            "Python License (Python-2.0)",
            "Python Software Foundation License",
            "PYTHON SOFTWARE FOUNDATION LICENSE VERSION 2",
        ),
        ("http://opensource.org/licenses/PythonSoftFoundation",),
        "",
        "Python-2.0",
    )
    RUBY = (
        ("Ruby License", "Ruby"),
        (
            "http://www.ruby-lang.org/en/LICENSE.txt",
            "http://www.ruby-lang.org/en/about/license.txt",
        ),
        "",
        "Ruby",
    )
    SLEEPYCAT = (
        (
            "The Sleepycat License",
            "Sleepycat",
            "The Sleepycat License (Sleepycat)",
            "Sleepycat License",
            "The Sleepycat Public License",
            "Berkeley Database License",
            "The Berkeley Database License",
        ),
        ("http://opensource.org/licenses/sleepycat",),
        "",
        "Sleepycat",
    )
    W3C = (
        (
            "The W3C SOFTWARE NOTICE AND LICENSE (W3C)",
            "W3C",
            "The W3C SOFTWARE NOTICE AND LICENSE",
            "W3C SOFTWARE NOTICE AND LICENSE (W3C)",
            "W3C SOFTWARE NOTICE AND LICENSE",
            "W3C® SOFTWARE NOTICE AND LICENSE",
        ),
        (
            "http://www.w3.org/Consortium/Legal/2002/copyright-software-20021231",
            "http://opensource.org/licenses/W3C.php",
        ),
        "",
        "W3C",
    )
    WTFPL = (
        (
            "WTFPL - Do What the Fuck You Want to Public License",
            "WTFPL",
            "Do What the Fuck You Want to Public License",
        ),
        (
            "http://www.wtfpl.net/",
            "http://www.wtfpl.net/txt/copying/",
        ),
        "LICENSE.WTFPL",
        "WTFPL",
    )
    ZLIB = (
        (
            "The zlib/libpng License (Zlib)",
            "Zlib",
            "The zlib/libpng License",
        ),
        ("http://opensource.org/licenses/zlib-license",),
        "LICENSE.ZLIB",
        "Zlib",
    )

    def __init__(
        self,
        names: tuple[str, ...],
        urls: tuple[str, ...],
        text_file: str,
        spdx_id: str,
    ) -> None:
        self.names = names
        self.urls = urls
        self.text_file = text_file
        self.spdx_id = spdx_id

    def __str__(self) -> str:
        return self.name

    @property
    def preferred_name(self) -> str:
        """Return the preferred display name (first alias)."""
        return self.names[0]

    @property
    def preferred_url(self) -> str:
        """Return the preferred canonical URL (first alias)."""
        return self.urls[0]

    def license_text(self) -> bytes:
        """Load the bundled license text.

        Returns:
            The UTF-8 encoded text with ``\\n`` line endings, or ``b""`` when
            this license has no associated text file.
        """
        return _load_text(self.text_file)

    @classmethod
    def from_name(cls, name: Optional[str]) -> "License":
        """Look up a license by display name (case-insensitive).

        Args:
            name: Display name such as "Apache License 2.0".

        Returns:
            The matching member, or ``License.UNKNOWN``.
        """
        if not name:
            return cls.UNKNOWN
        return _NAME_INDEX.get(name.strip().casefold(), cls.UNKNOWN)

    @classmethod
    def from_url(cls, url: Optional[str]) -> "License":
        """Look up a license by canonical URL (case-insensitive).

        The scheme (http/https) and a trailing slash are not significant.

        Args:
            url: License URL.

        Returns:
            The matching member, or ``License.UNKNOWN``.
        """
        if not url:
            return cls.UNKNOWN
        return _URL_INDEX.get(_url_key(url), cls.UNKNOWN)

    @classmethod
    def from_spdx(cls, expression: Optional[str]) -> "License":
        """Look up a license by SPDX identifier.

        The identifier is normalized with the license-expression library,
        so ``"apache-2.0"`` resolves the same as ``"Apache-2.0"``. A
        ``WITH`` exception matches only the member that carries it. Compound
        expressions (``MIT OR Apache-2.0``) are not catalog entries and
        resolve to ``License.UNKNOWN``.

        Args:
            expression: SPDX license identifier.

        Returns:
            The matching member, or ``License.UNKNOWN``.
        """
        if not expression or not expression.strip():
            return cls.UNKNOWN

        try:
            parsed = SPDX.parse(expression.strip(), validate=True)
        except Exception as e:
            logger.debug("Not an SPDX identifier '%s': %s", expression, e)
            return cls.UNKNOWN

        if parsed is None:
            return cls.UNKNOWN
        return _SPDX_INDEX.get(str(parsed).casefold(), cls.UNKNOWN)

    @classmethod
    def parse(cls, value: Optional[str]) -> "License":
        """Resolve a user-supplied license reference.

        Tries, in order: member name (``"APACHE_2"``), SPDX identifier,
        display name, URL.

        Args:
            value: License reference from a config or rule file.

        Returns:
            The matching member, or ``License.UNKNOWN``.
        """
        if not value or not value.strip():
            return cls.UNKNOWN

        value = value.strip()
        if value in cls.__members__:
            return cls[value]

        for lookup in (cls.from_spdx, cls.from_name, cls.from_url):
            found = lookup(value)
            if found is not cls.UNKNOWN:
                return found
        return cls.UNKNOWN


def _url_key(url: str) -> str:
    key = url.strip().casefold()
    for scheme in ("https://", "http://"):
        if key.startswith(scheme):
            key = key[len(scheme):]
            break
    return key.rstrip("/")


def _build_indexes() -> tuple[dict[str, License], dict[str, License], dict[str, License]]:
    names: dict[str, License] = {}
    urls: dict[str, License] = {}
    spdx_ids: dict[str, License] = {}

    for member in License:
        for name in member.names:
            names.setdefault(name.casefold(), member)
        for url in member.urls:
            if url:
                urls.setdefault(_url_key(url), member)
        if member.spdx_id:
            spdx_ids.setdefault(member.spdx_id.casefold(), member)

    return names, urls, spdx_ids


_NAME_INDEX, _URL_INDEX, _SPDX_INDEX = _build_indexes()


@lru_cache(maxsize=None)
def _load_text(text_file: str) -> bytes:
    if not text_file:
        return b""

    resource = files("license_attribution.texts").joinpath(text_file)
    text = resource.read_text(encoding="utf-8")
    return text.replace("\r\n", "\n").encode("utf-8")
