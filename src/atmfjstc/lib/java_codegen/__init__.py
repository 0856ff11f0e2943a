"""
A declaration model and renderer for generating Java-style source files.

Rationale
---------

Generating source code for a statically typed, package-based language such as Java involves a number of chores that
have nothing to do with what the generated code actually does:

- Every type that is referenced must be either imported or written out fully qualified. Deciding which is which
  requires knowing all the references in the file *before* the first line (the imports) is written, and some simple
  names cannot be imported at all because they clash with each other, or with the types declared in the file itself.

- Long lines must be wrapped, but only at points where a line break does not change the meaning of the code (i.e. not
  inside a string literal or in the middle of a name), and continuation lines must be indented consistently.

- Indentation, statement continuation, braces around control flow blocks and doc comments must be balanced and
  consistently formatted across thousands of lines of output built by many different parts of the generator.

- Generators often assemble declarations out of order (e.g. a method that refers to a field which is only added to
  the class later), so the declaration objects should not require their contents to be complete at the moment they are
  created.

This package takes care of all of the above. You assemble a tree of declarations (`ast.types.TypeSpec`,
`ast.members.MethodSpec`, etc.) using builders, with the code inside methods expressed as template fragments
(`ast.code.CodeBlock`) whose placeholders refer to types, names and literal values. The renderer then does all the
layout and name resolution work.


Template fragments
------------------

Code is written as format strings with ``%``-introduced placeholders, e.g.::

    CodeBlock.of('%T result = new %T<>(%L);\\n', LIST, ARRAY_LIST, capacity)

Here ``%T`` stands for a type reference (spelled briefly or fully qualified as appropriate), ``%L`` for a literal
value, ``%S`` for a string that will be quoted and escaped, and ``%N`` for the name of a declaration. See `ast.code`
for the full list, including the markers for indentation, statements and wrapping points.


Example
-------

::

    hello = (
        MethodSpec.method_builder('main')
        .add_modifiers(Modifier.PUBLIC, Modifier.STATIC)
        .add_parameter(array_of(STRING), 'args')
        .add_statement('%T.out.println(%S)', QualifiedName.of('java.lang', 'System'), "Hello, world!")
        .build()
    )

    main_class = TypeSpec.class_builder('HelloWorld').add_modifiers(Modifier.PUBLIC).add_method(hello).build()

    print(render_to_str(JavaFile.builder('com.example', main_class).build()))

Result::

    package com.example;

    import java.lang.String;
    import java.lang.System;

    public class HelloWorld {
      public static void main(String[] args) {
        System.out.println("Hello, world!");
      }
    }

Note that types in ``java.lang`` are handled like any other package, i.e. they are imported explicitly.
"""
