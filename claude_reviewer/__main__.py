from claude_reviewer.review import main

main()
