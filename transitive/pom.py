"""
This file provides all our POM file handling.  POM files are the descriptors found in
Maven-style repositories.
"""
import re
from pathlib import Path
from typing import Callable, Dict, Generator, List, Optional, Tuple
from xml.etree import ElementTree
from xml.etree.ElementTree import Element

from transitive.descriptors import Descriptor, DeclaredDependency
from transitive.file_cache import FileCache
from transitive.models import Artifact, DescriptorUnavailable, Exclusion
from transitive.utils import verbose_out

_var_pattern = re.compile(r'[$]{(.*?)[}]')
_max_substitution_passes = 10


class XmlElement(object):
    """
    A thin wrapper around XML element objects to make namespace stuff transparent.
    """
    def __init__(self, element: Element, namespace: str):
        self.element = element
        self._namespace = namespace

    def tag(self) -> str:
        """
        Gets the tag of the element, without any namespace information.

        :return: the simple tag of the element.
        """
        return self.element.tag[len(self._namespace):]

    def text(self) -> Optional[str]:
        """
        Gets the text value for the element, stripped of surrounding white space.

        :return: the element's text value.
        """
        return self.element.text.strip() if self.element.text else self.element.text

    def find(self, tag_name: str) -> Optional['XmlElement']:
        result = self.element.find(f'{self._namespace}{tag_name}')
        return None if result is None else XmlElement(result, self._namespace)

    def findall(self, tag_name: str) -> List['XmlElement']:
        result = self.element.findall(f'{self._namespace}{tag_name}')
        return [XmlElement(element, self._namespace) for element in result]

    def __iter__(self):
        return iter([XmlElement(element, self._namespace) for element in self.element])


def _wrap_root(root: Element) -> XmlElement:
    namespace = ''
    if root.tag.startswith('{'):
        namespace = root.tag[:root.tag.find('}') + 1]
    return XmlElement(root, namespace)


def parse_xml_file(path: Path) -> XmlElement:
    """
    This function is used to parse the given XML file into a document represented
    by its root element.  Any namespace the root element is in is assumed for the
    whole document.

    :param path: the path to the XML file to read.
    :return: the root element of the XML document.
    """
    return _wrap_root(ElementTree.parse(path).getroot())


def parse_xml_string(text: str) -> XmlElement:
    return _wrap_root(ElementTree.fromstring(text))


POMLoader = Callable[[str, str, str], 'POMFile']


class POMFile(object):
    """
    Instances of this class represent a loaded POM file.  Parent POM files and imported
    bills of materials are loaded, as needed, through the given loader.
    """
    def __init__(self, root: XmlElement, loader: Optional[POMLoader] = None):
        """
        A function to create instances of the ``POMFile`` class.

        :param root: the root element of the parsed POM file.
        :param loader: a function that loads a POM file by group, name and version.
        """
        self._root = root
        self._loader = loader
        self._properties: Dict[str, str] = {}
        self._parent = self._get_parent()
        self._group_id = self._get_element_text(self._root.find('groupId'))
        self._artifact_id = self._get_element_text(self._root.find('artifactId'))
        self._version = self._get_element_text(self._root.find('version'))
        self._properties = self._get_properties()
        self._imported = self._get_imported()

    @staticmethod
    def _get_element_text(element: Optional[XmlElement]) -> Optional[str]:
        return None if element is None else element.text()

    @property
    def group_id(self) -> Optional[str]:
        """
        A read-only property that returns the group ID specified in this POM file.
        If it doesn't have one, any existing parent is queried for it.
        """
        return self._group_id or (self._parent.group_id if self._parent else None)

    @property
    def artifact_id(self) -> Optional[str]:
        return self._artifact_id

    @property
    def version(self) -> Optional[str]:
        """
        A read-only property that returns the version specified in this POM file.
        If it doesn't have one, any existing parent is queried for it.
        """
        return self._version or (self._parent.version if self._parent else None)

    @property
    def properties(self) -> Dict[str, str]:
        return self._properties

    def _load(self, group: Optional[str], name: Optional[str], version: Optional[str]) -> Optional['POMFile']:
        if self._loader is None or not (group and name and version):
            return None
        return self._loader(group, name, version)

    def _get_parent(self) -> Optional['POMFile']:
        """
        A function that returns a parent POM file if our XML indicates one.

        :return: the parent POM file, if one is specified.
        """
        parent_element = self._root.find('parent')

        if parent_element is None:
            return None

        group, name, version = self.get_dependency_info(parent_element)

        return self._load(group, name, version)

    def _get_properties(self) -> Dict[str, str]:
        """
        A function that gathers the properties available for substitution in this POM
        file.  Our own properties override those inherited from any parent.

        :return: a dictionary of property names mapped to their values.
        """
        result = dict(self._parent.properties) if self._parent else {}

        for props in self._root.findall('properties'):
            for prop in props:
                result[prop.tag()] = prop.text() or ''

        for prefix in ('project', 'pom'):
            if self.group_id:
                result[f'{prefix}.groupId'] = self.group_id
            if self._artifact_id:
                result[f'{prefix}.artifactId'] = self._artifact_id
            if self.version:
                result[f'{prefix}.version'] = self.version

        if self._parent and self._parent.version:
            result['project.parent.version'] = self._parent.version
            result['project.parent.groupId'] = self._parent.group_id

        return result

    def _get_imported(self) -> List['POMFile']:
        """
        A function that returns the list of bills of materials that this POM file
        imports into its dependency management.

        :return: a list of imported POM files.
        """
        result = []

        for dependency in self._management_elements():
            dep_type = self.get_element_value(dependency, 'type')
            dep_scope = self.get_element_value(dependency, 'scope')

            if dep_type == 'pom' and dep_scope == 'import':
                pom_file = self._load(*self.get_dependency_info(dependency))

                if pom_file:
                    result.append(pom_file)

        return result

    def substitute(self, text: Optional[str]) -> Optional[str]:
        """
        A function that resolves any ``${name}`` property references in the given text.
        References to unknown properties are replaced with the empty string.

        :param text: the text to resolve references in.  This may be ``None``.
        :return: the text with all references resolved.
        """
        def do_substitution(match) -> str:
            name = match.group(1).strip()
            return self._properties[name] if name in self._properties else ''

        for _ in range(_max_substitution_passes):
            if not text or not _var_pattern.search(text):
                break
            text = _var_pattern.sub(do_substitution, text)

        return text

    def get_element_value(self, element: XmlElement, tag: str) -> Optional[str]:
        """
        A function that returns the text of the named immediate child of the given
        element, after resolving any property references.

        :param element: the parent element to start with.
        :param tag: the tag of the desired child.
        :return: the text value of the child element or ``None``.
        """
        return self.substitute(self._get_element_text(element.find(tag)))

    def get_dependency_info(self, dependency: XmlElement) -> Tuple[str, str, Optional[str]]:
        """
        A helper function that retrieves the group, name and version values from a
        dependency element.

        :param dependency: the dependency element to pull the information from.
        :return: a tuple containing the group, name and optional version.
        """
        group = self.get_element_value(dependency, 'groupId')
        name = self.get_element_value(dependency, 'artifactId')
        version = self.get_element_value(dependency, 'version')

        return group, name, version

    def _management_elements(self) -> Generator[XmlElement, None, None]:
        for management in self._root.findall('dependencyManagement'):
            for dependency_list in management.findall('dependencies'):
                for dependency in dependency_list.findall('dependency'):
                    yield dependency

    def managed_version(self, group: str, name: str) -> Optional[str]:
        """
        A function that looks up the version the dependency management of this POM file
        (or any it imports or inherits from) gives to a dependency.

        :param group: the group to search for.
        :param name: the name to search for.
        :return: the managed version or ``None``.
        """
        for dependency in self._management_elements():
            dep_group, dep_name, dep_version = self.get_dependency_info(dependency)

            if dep_group == group and dep_name == name and dep_version:
                return dep_version

        for pom_file in self._imported:
            version = pom_file.managed_version(group, name)

            if version:
                return version

        return self._parent.managed_version(group, name) if self._parent else None

    def _get_exclusions(self, dependency: XmlElement) -> List[Exclusion]:
        result = []

        for exclusions in dependency.findall('exclusions'):
            for exclusion in exclusions.findall('exclusion'):
                group = self.get_element_value(exclusion, 'groupId')
                name = self.get_element_value(exclusion, 'artifactId')

                if group and name:
                    result.append(Exclusion(group, name))

        return result

    def declared_dependencies(self) -> Generator[DeclaredDependency, None, None]:
        """
        A function that returns a generator over this POM file's declared dependencies,
        each paired with the scope it was declared in.  Optional dependencies and any
        whose version cannot be determined are skipped.
        """
        for dependencies in self._root.findall('dependencies'):
            for dependency in dependencies.findall('dependency'):
                group, name, version = self.get_dependency_info(dependency)

                if self.get_element_value(dependency, 'optional') == 'true':
                    continue

                version = version or self.managed_version(group, name)

                # If the version could not be resolved, it's not a dependency we can use.
                if not (group and name and version):
                    verbose_out(f'Skipping {group}:{name} in {self.group_id}:{self._artifact_id}; no version.')
                    continue

                artifact = Artifact(
                    group, name, version,
                    artifact_type=self.get_element_value(dependency, 'type'),
                    classifier=self.get_element_value(dependency, 'classifier'),
                    exclusions=self._get_exclusions(dependency)
                )

                yield self.get_element_value(dependency, 'scope'), artifact

    def to_descriptor(self) -> Descriptor:
        return Descriptor(self.declared_dependencies())


class RepositoryDescriptorSource(object):
    """
    Instances of this class load descriptors from a Maven-style repository on disk.  If
    a remote repository is configured, descriptors missing locally are downloaded into
    the local repository first.
    """
    def __init__(self, local_root: Path, remote_url: Optional[str] = None):
        """
        A function to create instances of the ``RepositoryDescriptorSource`` class.

        :param local_root: the root directory of the local repository.
        :param remote_url: the base URL of an optional remote repository.
        """
        self._local_root = local_root
        self._remote_url = remote_url.rstrip('/') if remote_url else None
        self._file_cache = FileCache(local_root)
        self._poms: Dict[Tuple[str, str, str], POMFile] = {}

    @staticmethod
    def relative_path(group: str, name: str, version: str) -> Path:
        """
        A function that returns where, relative to a repository root, the POM file for
        the given coordinates lives.
        """
        return Path(*group.split('.')) / name / version / f'{name}-{version}.pom'

    def _locate(self, group: str, name: str, version: str) -> Optional[Path]:
        relative = self.relative_path(group, name, version)

        if self._remote_url:
            try:
                return self._file_cache.resolve_file(f'{self._remote_url}/{relative.as_posix()}', relative,
                                                     optional=True)
            except ValueError as error:
                raise DescriptorUnavailable(error.args[0])

        path = self._local_root / relative

        return path if path.is_file() else None

    def load_pom(self, group: str, name: str, version: str) -> POMFile:
        """
        A function that loads the POM file for the given coordinates.

        :param group: the group of the desired POM file.
        :param name: the name of the desired POM file.
        :param version: the version of the desired POM file.
        :return: the loaded POM file.
        :raises DescriptorUnavailable: if the POM file cannot be found or parsed.
        """
        key = (group, name, version)

        if key not in self._poms:
            path = self._locate(group, name, version)

            if path is None:
                raise DescriptorUnavailable(f'Could not find the descriptor for {group}:{name}:{version}.')

            try:
                self._poms[key] = POMFile(parse_xml_file(path), self.load_pom)
            except ElementTree.ParseError as error:
                raise DescriptorUnavailable(f'Could not parse the descriptor, {path}: {error}')

        return self._poms[key]

    def __call__(self, artifact: Artifact) -> Descriptor:
        return self.load_pom(artifact.group, artifact.name, artifact.version).to_descriptor()
